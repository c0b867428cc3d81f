import asyncio
import io

import fitz
import numpy as np
import pytest
from PIL import Image

from inkpdf.docs.model import DocumentOptions, ExportOptions, PageOptions, StrokeStyle
from inkpdf.docs.pdf_io import PyMuPdfDecoder, render_page_pixels
from inkpdf.docs.pdf_writer import PyMuPdfEncoder
from inkpdf.errors import EncodeError
from inkpdf.input.events import EventKind, PointerEvent
from inkpdf.pipeline.export import ExportPipeline, encode_frame
from inkpdf.pipeline.renderer import PageRenderer
from inkpdf.pipeline.session import DocumentSession

from fakes import FakeDecoder, RecordingEncoder

DOC = b"doc-a"


def _page_sizes(data):
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return [(round(page.rect.width), round(page.rect.height)) for page in doc]
    finally:
        doc.close()


def _loaded(decoder, scale=1.0, style=None):
    return DocumentSession(PageRenderer(decoder, scale=scale), stroke_style=style)


def test_first_page_uses_document_format_and_rest_use_page_format(letter_pdf):
    session = _loaded(PyMuPdfDecoder(), scale=0.25)
    pipeline = ExportPipeline(session, PyMuPdfEncoder())
    options = ExportOptions(page=PageOptions(format="a5"), document=DocumentOptions(format="a4"))

    async def run():
        await session.load(letter_pdf)
        return await pipeline.export(options)

    out = asyncio.run(run())
    assert _page_sizes(out) == [(595, 842), (420, 595)]


def test_pages_fall_back_to_document_geometry(a4_pdf):
    session = _loaded(PyMuPdfDecoder(), scale=0.25)
    pipeline = ExportPipeline(session, PyMuPdfEncoder())

    async def run():
        await session.load(a4_pdf)
        return await pipeline.export()

    assert _page_sizes(asyncio.run(run())) == [(595, 842)] * 3


def test_landscape_and_numeric_formats(a4_pdf):
    session = _loaded(PyMuPdfDecoder(), scale=0.25)
    pipeline = ExportPipeline(session, PyMuPdfEncoder())
    options = ExportOptions(
        page=PageOptions(format=(100, 50), orientation="portrait"),
        document=DocumentOptions(format="a4", orientation="landscape", unit="mm"),
    )

    async def run():
        await session.load(a4_pdf)
        return await pipeline.export(options)

    sizes = _page_sizes(asyncio.run(run()))
    assert sizes[0] == (842, 595)
    # 50 x 100 mm once forced to portrait
    assert sizes[1:] == [(142, 283), (142, 283)]


def test_export_round_trips_page_count(a4_pdf):
    decoder = PyMuPdfDecoder()
    session = _loaded(decoder, scale=0.25)
    pipeline = ExportPipeline(session, PyMuPdfEncoder())

    async def run():
        await session.load(a4_pdf)
        out = await pipeline.export()
        return await decoder.decode(out)

    assert asyncio.run(run()).page_count == 3


def test_stroke_is_burned_into_exported_page():
    source = fitz.open()
    source.new_page(width=595, height=842)
    data = source.tobytes()
    source.close()

    session = _loaded(PyMuPdfDecoder(), scale=1.0, style=StrokeStyle(color="#ff0000", width=6))
    pipeline = ExportPipeline(session, PyMuPdfEncoder())

    async def run():
        await session.load(data)
        surface = session.surface(1)
        surface.events.dispatch(PointerEvent.mouse(EventKind.DOWN, 100, 400))
        surface.events.dispatch(PointerEvent.mouse(EventKind.MOVE, 500, 400))
        surface.events.dispatch(PointerEvent.mouse(EventKind.UP, 500, 400))
        return await pipeline.export()

    out = asyncio.run(run())
    pixels = render_page_pixels(out, 1, 1.0)
    red, green, blue = (int(v) for v in pixels[400, 300])
    assert red > 180 and green < 90 and blue < 90
    assert pixels[200, 300].min() >= 250


def test_saving_signal_brackets_export():
    session = _loaded(FakeDecoder({DOC: [(10, 10)] * 2}))
    encoder = RecordingEncoder()
    pipeline = ExportPipeline(session, encoder)
    states = []
    pipeline.saving.connect(states.append)

    async def run():
        await session.load(DOC)
        return await pipeline.export()

    assert asyncio.run(run()) == b"%PDF-fake 2"
    assert states == [True, False]
    assert encoder.calls == ["create", "add_image", "add_page", "add_image", "serialize"]


def test_each_image_fills_its_page():
    session = _loaded(FakeDecoder({DOC: [(10, 10)] * 2}))
    encoder = RecordingEncoder()
    pipeline = ExportPipeline(session, encoder)
    handles = []
    original_serialize = encoder.serialize

    def capture_handle(handle):
        handles.append(handle)
        return original_serialize(handle)

    encoder.serialize = capture_handle
    options = ExportOptions(page=PageOptions(format="a5"), document=DocumentOptions(format="a4", unit="pt"))

    async def run():
        await session.load(DOC)
        await pipeline.export(options)

    asyncio.run(run())
    geometries = [geometry for _, geometry in handles[0]["images"]]
    assert geometries == [(0.0, 0.0, 595.0, 842.0), (0.0, 0.0, 420.0, 595.0)]


def test_export_without_pages_fails():
    session = _loaded(FakeDecoder({}))
    encoder = RecordingEncoder()
    pipeline = ExportPipeline(session, encoder)
    failures, states = [], []
    pipeline.export_failed.connect(failures.append)
    pipeline.saving.connect(states.append)

    with pytest.raises(EncodeError):
        asyncio.run(pipeline.export())

    assert len(failures) == 1
    assert states == [True, False]
    assert encoder.calls == []


def test_encoder_failure_discards_partial_document():
    session = _loaded(FakeDecoder({DOC: [(10, 10)] * 3}))
    encoder = RecordingEncoder(fail_on_image=2)
    pipeline = ExportPipeline(session, encoder)
    failures = []
    pipeline.export_failed.connect(failures.append)

    async def run():
        await session.load(DOC)
        await pipeline.export()

    with pytest.raises(EncodeError):
        asyncio.run(run())
    assert encoder.discarded == 1
    assert "serialize" not in encoder.calls
    assert len(failures) == 1


def test_unknown_image_format_fails_export():
    session = _loaded(FakeDecoder({DOC: [(10, 10)]}))
    encoder = RecordingEncoder()
    pipeline = ExportPipeline(session, encoder, ExportOptions(image_format="tiff"))

    async def run():
        await session.load(DOC)
        await pipeline.export()

    with pytest.raises(EncodeError):
        asyncio.run(run())
    assert encoder.discarded == 1


def test_export_waits_for_load_in_flight():
    session = _loaded(FakeDecoder({DOC: [(10, 10)] * 3}, delays={3: 0.02}))
    encoder = RecordingEncoder()
    pipeline = ExportPipeline(session, encoder)

    async def run():
        load = asyncio.ensure_future(session.load(DOC))
        await asyncio.sleep(0)
        out = await pipeline.export()
        await load
        return out

    assert asyncio.run(run()) == b"%PDF-fake 3"


def test_encode_frame_formats():
    frame = np.zeros((4, 6, 3), dtype=np.uint8)
    frame[:, :, 0] = 200

    png = Image.open(io.BytesIO(encode_frame(frame, "png")))
    assert png.format == "PNG" and png.size == (6, 4)
    assert png.getpixel((0, 0)) == (200, 0, 0)

    jpeg = Image.open(io.BytesIO(encode_frame(frame, "JPEG", jpeg_quality=50)))
    assert jpeg.format == "JPEG"

    with pytest.raises(EncodeError):
        encode_frame(frame, "bmp")


class _BrokenImageEncoder(RecordingEncoder):
    def add_image(self, handle, image, geometry):
        raise TypeError("unexpected geometry")


def test_unexpected_encoder_error_is_reported_as_encode_error():
    session = _loaded(FakeDecoder({DOC: [(10, 10)] * 2}))
    encoder = _BrokenImageEncoder()
    pipeline = ExportPipeline(session, encoder)
    failures, states = [], []
    pipeline.export_failed.connect(failures.append)
    pipeline.saving.connect(states.append)

    async def run():
        await session.load(DOC)
        await pipeline.export()

    with pytest.raises(EncodeError) as excinfo:
        asyncio.run(run())
    assert isinstance(excinfo.value.__cause__, TypeError)
    assert len(failures) == 1 and failures[0] is excinfo.value
    assert states == [True, False]
    assert encoder.discarded == 1
