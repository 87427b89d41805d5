"""
Unit Tests for the Scan Validator and upload types.
"""
import base64
import pytest

from cogniscan.core.analysis import ScanType, ScanUpload, ScanValidator
from cogniscan.utils import ValidationError


@pytest.fixture
def validator() -> ScanValidator:
    return ScanValidator()


class TestScanValidator:

    def test_accepts_png(self, validator, png_upload):
        assert validator.validate(png_upload) is png_upload

    @pytest.mark.parametrize("mime", ["image/jpeg", "image/dicom", "IMAGE/PNG"])
    def test_accepts_any_image_type(self, validator, png_bytes, mime):
        upload = ScanUpload(file=png_bytes, file_name="scan", mime_type=mime, scan_type=ScanType.CT)
        validator.validate(upload)

    @pytest.mark.parametrize("mime", ["application/pdf", "text/plain", "", "imagepng"])
    def test_rejects_non_images(self, validator, png_bytes, mime):
        upload = ScanUpload(file=png_bytes, file_name="report.pdf", mime_type=mime)

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(upload)
        assert exc_info.value.details["field"] == "file"
        assert "image file" in exc_info.value.message

    def test_rejects_empty_file(self, validator):
        upload = ScanUpload(file=b"", file_name="empty.png", mime_type="image/png")
        with pytest.raises(ValidationError):
            validator.validate(upload)

    def test_rejects_unknown_scan_type(self, validator, png_bytes):
        upload = ScanUpload(file=png_bytes, file_name="x.png", mime_type="image/png", scan_type="XRAY")
        with pytest.raises(ValidationError) as exc_info:
            validator.validate(upload)
        assert exc_info.value.field == "scan_type"

    def test_coerces_scan_type_string(self, validator, png_bytes):
        upload = ScanUpload(file=png_bytes, file_name="x.png", mime_type="image/png", scan_type="PET")
        validator.validate(upload)
        assert upload.scan_type is ScanType.PET


class TestScanUpload:

    def test_encode_is_base64(self, png_upload, png_bytes):
        assert base64.b64decode(png_upload.encode()) == png_bytes

    def test_data_uri(self, png_upload):
        assert png_upload.data_uri().startswith("data:image/png;base64,")

    def test_scan_type_descriptions(self):
        assert ScanType.MRI.description == "Magnetic Resonance Imaging"
