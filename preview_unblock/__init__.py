"""Preview Unblock: removes the "downloaded from the internet" marker from PDFs.

Watches a folder for PDF files and deletes their ``Zone.Identifier``
marker so previews open without a security prompt.
"""

__version__ = "1.0.0"
__app_name__ = "Preview Unblock"
