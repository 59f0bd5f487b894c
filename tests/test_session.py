import asyncio
import base64
import io
import json
from datetime import date
from pathlib import Path

from PIL import Image

from hand_ocr.core.errors import CollaboratorError
from hand_ocr.core.result import CropRectangle, ImagePayload
from hand_ocr.pipeline.client import TranscriptionClient
from hand_ocr.pipeline.session import NO_IMAGE_MESSAGE, Session


def _response(text: str, table=None) -> str:
    return json.dumps({"isTable": table is not None, "textContent": text, "tableData": table})


class _ScriptedEngine:
    """Answers each call with the next scripted reply; gated replies wait for release()."""

    def __init__(self, *replies) -> None:
        self.name = "scripted"
        self.replies = list(replies)
        self.images = []
        self._gate: asyncio.Event | None = None

    def release(self) -> None:
        self._gate.set()

    async def generate(self, image, prompt: str) -> str:
        self.images.append(image)
        reply, gated = self.replies.pop(0)
        if gated:
            self._gate = self._gate or asyncio.Event()
            await self._gate.wait()
        if isinstance(reply, Exception):
            raise reply
        return reply


def _session(engine, tmp_path: Path, **kwargs) -> Session:
    return Session(TranscriptionClient(engine, timeout=5.0), output_dir=tmp_path, **kwargs)


def test_convert_without_image_sets_error(tmp_path: Path) -> None:
    session = _session(_ScriptedEngine(), tmp_path)

    assert asyncio.run(session.convert()) is None
    assert session.error == NO_IMAGE_MESSAGE
    assert session.generation == 0


def test_successful_conversion(make_payload, tmp_path: Path) -> None:
    engine = _ScriptedEngine((_response("Dear diary"), False))
    session = _session(engine, tmp_path)
    session.select_image(make_payload((64, 48)))

    result = asyncio.run(session.convert())

    assert result is session.result
    assert result.text_content == "Dear diary"
    assert session.error is None
    assert session.is_loading is False


def test_image_is_downscaled_before_upload(make_payload, tmp_path: Path) -> None:
    engine = _ScriptedEngine((_response("x"), False))
    session = _session(engine, tmp_path, max_dimension=32)
    original = make_payload((128, 64))
    session.select_image(original)

    asyncio.run(session.convert())

    sent = engine.images[0]
    assert sent.mime_type == "image/png"
    with Image.open(io.BytesIO(base64.b64decode(sent.data))) as image:
        assert image.size == (32, 16)
    assert session.image is original


def test_failure_keeps_image_and_crop_for_retry(make_payload, tmp_path: Path) -> None:
    engine = _ScriptedEngine((CollaboratorError("quota exceeded"), False), (_response("second try"), False))
    session = _session(engine, tmp_path)
    session.select_image(make_payload((100, 100)))
    cropped = session.confirm_crop(CropRectangle(x=10, y=10, width=50, height=50, display_width=100, display_height=100))
    assert cropped is not None

    assert asyncio.run(session.convert()) is None
    assert session.error == "Failed to process image: quota exceeded"
    assert session.is_loading is False
    assert session.image is cropped
    assert session.crop is not None

    session.dismiss_error()
    result = asyncio.run(session.convert())
    assert result.text_content == "second try"
    assert session.error is None


def test_non_image_selection_fails_with_message(tmp_path: Path) -> None:
    engine = _ScriptedEngine()
    session = _session(engine, tmp_path)
    session.select_image(ImagePayload(data=b"%PDF", mime_type="application/pdf", filename="doc.pdf"))

    assert asyncio.run(session.convert()) is None
    assert session.error == "Failed to process image: Invalid file type. Please upload an image."
    assert engine.images == []


def test_bad_crop_sets_error_and_keeps_image(make_payload, tmp_path: Path) -> None:
    session = _session(_ScriptedEngine(), tmp_path)
    payload = make_payload((100, 100))
    session.select_image(payload)

    result = session.confirm_crop(CropRectangle(x=90, y=0, width=20, height=20, display_width=100, display_height=100))

    assert result is None
    assert session.error.startswith("Failed to crop image:")
    assert session.image is payload


def test_cancel_crop_restores_original(make_payload, tmp_path: Path) -> None:
    session = _session(_ScriptedEngine(), tmp_path)
    payload = make_payload((100, 100))
    session.select_image(payload)
    session.confirm_crop(CropRectangle(x=0, y=0, width=50, height=50, display_width=100, display_height=100))

    session.cancel_crop()

    assert session.image is payload
    assert session.crop is None


def test_stale_result_does_not_overwrite_newer_conversion(make_payload, tmp_path: Path) -> None:
    engine = _ScriptedEngine((_response("old"), True), (_response("new"), False))
    session = _session(engine, tmp_path)
    session.select_image(make_payload((64, 64)))

    async def scenario() -> None:
        selected = session.generation
        first = asyncio.ensure_future(session.convert())
        await asyncio.sleep(0.01)
        assert session.generation == selected + 1

        second = await session.convert()
        assert second.text_content == "new"

        engine.release()
        assert await first is None
        assert session.result is second
        assert session.is_loading is False

    asyncio.run(scenario())


def test_reset_supersedes_running_conversion(make_payload, tmp_path: Path) -> None:
    engine = _ScriptedEngine((_response("too late"), True))
    session = _session(engine, tmp_path)
    session.select_image(make_payload((64, 64)))

    async def scenario() -> None:
        pending = asyncio.ensure_future(session.convert())
        await asyncio.sleep(0.01)
        assert session.is_loading is True

        session.reset()
        engine.release()
        assert await pending is None

    asyncio.run(scenario())
    assert session.result is None
    assert session.image is None
    assert session.is_loading is False


def test_new_image_supersedes_running_conversion(make_payload, tmp_path: Path) -> None:
    engine = _ScriptedEngine((_response("text of image A"), True))
    session = _session(engine, tmp_path)
    session.select_image(make_payload((64, 64), filename="a.png"))
    second = make_payload((64, 64), color="black", filename="b.png")

    async def scenario() -> None:
        pending = asyncio.ensure_future(session.convert())
        await asyncio.sleep(0.01)

        session.select_image(second)
        assert session.is_loading is False
        engine.release()
        assert await pending is None

    asyncio.run(scenario())
    assert session.image is second
    assert session.result is None
    assert session.error is None


def test_confirmed_crop_supersedes_running_conversion(make_payload, tmp_path: Path) -> None:
    engine = _ScriptedEngine((_response("whole page"), True))
    session = _session(engine, tmp_path)
    session.select_image(make_payload((100, 100)))

    async def scenario() -> None:
        pending = asyncio.ensure_future(session.convert())
        await asyncio.sleep(0.01)

        cropped = session.confirm_crop(
            CropRectangle(x=0, y=0, width=50, height=50, display_width=100, display_height=100)
        )
        assert cropped is not None
        engine.release()
        assert await pending is None

    asyncio.run(scenario())
    assert session.result is None
    assert session.is_loading is False


def test_image_types_without_a_resizer_are_sent_as_is(tmp_path: Path) -> None:
    engine = _ScriptedEngine((_response("from heic"), False))
    session = _session(engine, tmp_path)
    photo = ImagePayload(data=b"heic container bytes", mime_type="image/heic", filename="IMG_0001.heic")
    session.select_image(photo)

    result = asyncio.run(session.convert())

    assert result.text_content == "from heic"
    assert len(engine.images) == 1
    assert engine.images[0].mime_type == "image/heic"
    assert base64.b64decode(engine.images[0].data) == photo.data


def test_corrupt_supported_image_still_fails_to_decode(tmp_path: Path) -> None:
    engine = _ScriptedEngine()
    session = _session(engine, tmp_path)
    session.select_image(ImagePayload(data=b"not really a png", mime_type="image/png", filename="broken.png"))

    assert asyncio.run(session.convert()) is None
    assert session.error.startswith("Failed to process image: Could not read broken.png")
    assert engine.images == []


def test_edit_and_export_table(make_payload, tmp_path: Path) -> None:
    engine = _ScriptedEngine((_response("a b", [["a", "b"], ["1", "2"]]), False))
    session = _session(engine, tmp_path)
    session.select_image(make_payload((64, 64)))
    asyncio.run(session.convert())

    session.edit_text("edited")
    session.edit_table([["a", "b"], ["1", "2,5"]])
    path = session.export_table(today=date(2024, 1, 2))

    assert session.result.text_content == "edited"
    assert path == tmp_path / "handwriting_table_2024-01-02.csv"
    assert path.read_text(encoding="utf-8") == 'a,b\n1,"2,5"'


def test_export_without_table_is_noop(make_payload, tmp_path: Path) -> None:
    engine = _ScriptedEngine((_response("just prose"), False))
    session = _session(engine, tmp_path)
    session.select_image(make_payload((64, 64)))
    asyncio.run(session.convert())

    assert session.export_table() is None
    assert list(tmp_path.iterdir()) == []
