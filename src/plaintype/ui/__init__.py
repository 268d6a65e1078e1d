"""Host-application glue driving documents through their lifecycle."""

from .document_controller import DocumentController, SaveDialogProvider, SaveDialogSession

__all__ = ["DocumentController", "SaveDialogProvider", "SaveDialogSession"]
