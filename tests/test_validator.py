"""Tests for file validation."""
import pytest

from batch_uploader.models import MB, UploadCandidate, UploadConfig
from batch_uploader.protocols import IFileValidator
from batch_uploader.services.validator import FileValidator, format_file_size


def _candidate(size, media_type="image/png", name="a.png"):
    return UploadCandidate(filename=name, media_type=media_type, data=b"x" * size)


@pytest.mark.parametrize(
    "size,expected",
    [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (10 * MB, "10 MB"),
        (1234567, "1.18 MB"),
        (5 * 1024 * MB, "5 GB"),
    ],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


class TestFileValidator:
    def test_implements_protocol(self):
        assert isinstance(FileValidator(), IFileValidator)

    def test_accepts_allowed_file(self):
        outcome = FileValidator().validate(_candidate(100))
        assert outcome.accepted is True

    def test_file_at_limit_is_accepted(self):
        validator = FileValidator(max_size=10)
        assert validator.validate(_candidate(10)).accepted is True

    def test_rejects_oversized_file(self):
        validator = FileValidator(max_size=10 * MB)
        outcome = validator.validate(_candidate(10 * MB + 1))
        assert outcome.rejected is True
        assert outcome.reason == "File size exceeds maximum allowed size of 10 MB"

    def test_rejects_disallowed_type(self):
        outcome = FileValidator().validate(_candidate(10, media_type="video/mp4", name="clip.mp4"))
        assert outcome.rejected is True
        assert outcome.reason == "File type video/mp4 is not allowed"

    def test_size_is_checked_before_type(self):
        validator = FileValidator(max_size=1)
        outcome = validator.validate(_candidate(5, media_type="video/mp4"))
        assert outcome.reason.startswith("File size exceeds")

    def test_custom_allowed_types(self):
        validator = FileValidator(allowed_types=["video/mp4"])
        assert validator.validate(_candidate(1, media_type="video/mp4")).accepted is True
        assert validator.validate(_candidate(1, media_type="image/png")).rejected is True

    def test_from_config(self):
        validator = FileValidator.from_config(UploadConfig(max_file_size=2048))
        assert validator.max_size == 2048
        assert validator.validate(_candidate(4096)).reason == (
            "File size exceeds maximum allowed size of 2 KB"
        )
