"""Editor package containing the text buffer and the open-document workspace."""

from .document_model import SourceBuffer, TextBuffer
from .workspace import DocumentWorkspace, OpenDocument

__all__ = ["SourceBuffer", "TextBuffer", "DocumentWorkspace", "OpenDocument"]
