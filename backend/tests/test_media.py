import base64

import pytest

from services.media import IMAGE_ONLY_PREFIXES, MediaValidationError, encode_upload, read_upload


def test_image_encoded():
    data_b64, mime_type = encode_upload(b"\x89PNG", "image/png")
    assert base64.b64decode(data_b64) == b"\x89PNG"
    assert mime_type == "image/png"


def test_video_accepted_for_fixit():
    _, mime_type = encode_upload(b"....", "Video/MP4")
    assert mime_type == "video/mp4"


def test_video_rejected_for_image_only_flows():
    with pytest.raises(MediaValidationError, match="valid image file"):
        encode_upload(b"....", "video/mp4", IMAGE_ONLY_PREFIXES)


@pytest.mark.parametrize("mime_type", [None, "", "application/pdf", "text/plain"])
def test_unsupported_types_rejected(mime_type):
    with pytest.raises(MediaValidationError):
        encode_upload(b"data", mime_type)


def test_empty_file_rejected():
    with pytest.raises(MediaValidationError, match="empty"):
        encode_upload(b"", "image/jpeg")


def test_size_limit():
    with pytest.raises(MediaValidationError, match="too large"):
        encode_upload(b"x" * 11, "image/jpeg", max_bytes=10)


class FakeUpload:
    def __init__(self, data: bytes):
        self.data = data
        self.sizes = []

    async def read(self, size: int = -1) -> bytes:
        self.sizes.append(size)
        return self.data if size < 0 else self.data[:size]


async def test_read_upload_stops_past_the_limit():
    upload = FakeUpload(b"x" * 50)

    data = await read_upload(upload, max_bytes=10)

    assert upload.sizes == [11]
    assert len(data) == 11
    with pytest.raises(MediaValidationError, match="too large"):
        encode_upload(data, "image/png", max_bytes=10)


async def test_read_upload_small_file_read_whole():
    data = await read_upload(FakeUpload(b"\x89PNG"), max_bytes=10)
    assert data == b"\x89PNG"
