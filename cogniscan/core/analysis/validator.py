"""
Scan Validator

Rejects non-image uploads locally, before any network call.
"""
from cogniscan.utils import get_logger, ValidationError
from .base import ScanType, ScanUpload

logger = get_logger(__name__)

INVALID_FILE_MESSAGE = "Please upload an image file (JPEG, PNG, DICOM)"


class ScanValidator:
    """Accepts any `image/*` MIME type; size is left to the transport layer."""

    def validate(self, upload: ScanUpload) -> ScanUpload:
        mime = (upload.mime_type or "").strip().lower()
        if not mime.startswith("image/"):
            logger.info(f"Rejected upload '{upload.file_name}' with type '{upload.mime_type}'")
            raise ValidationError(
                INVALID_FILE_MESSAGE,
                field="file",
                details={"mime_type": upload.mime_type},
            )

        if not upload.file:
            raise ValidationError("The selected file is empty", field="file")

        if upload.scan_type is not None:
            try:
                upload.scan_type = ScanType(upload.scan_type)
            except ValueError:
                raise ValidationError(
                    f"Unknown scan type: {upload.scan_type}. Valid: {[s.value for s in ScanType]}",
                    field="scan_type",
                )

        return upload
