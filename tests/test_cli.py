import asyncio

import fitz
import pytest

import main
from inkpdf.config import Settings
from inkpdf.docs.payload import encode_payload
from inkpdf.pipeline.controller import build_controller


def _write_pdf(tmp_path, data, name="in.pdf"):
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)


def test_parse_format():
    assert main._parse_format("a4") == "a4"
    assert main._parse_format("210x297") == (210.0, 297.0)
    assert main._parse_format("wide x tall") == "wide x tall"
    assert main._parse_format(None) is None


def test_replay_strokes_skips_unknown_pages(letter_pdf):
    controller = build_controller(Settings(render_scale=0.25))
    strokes = [
        {"page": 1, "points": [[5, 5], [40, 40]]},
        {"page": 9, "points": [[5, 5], [40, 40]]},
        {"page": 2, "points": []},
        {"page": 2, "points": [[10, 10], [20, 20]], "display": [0, 0, 76.5, 99], "touch": True},
    ]

    async def run():
        await controller.set_source(encode_payload(letter_pdf))
        before = [s.snapshot() for s in controller.session.surfaces]
        count = main.replay_strokes(controller.session, strokes)
        return before, count

    before, count = asyncio.run(run())
    assert count == 2
    for frame, surface in zip(before, controller.session.surfaces):
        assert not (frame == surface.pixels).all()
    controller.dispose()


def test_annotate_file_writes_output(tmp_path, a4_pdf):
    src = _write_pdf(tmp_path, a4_pdf)
    out = str(tmp_path / "out.pdf")

    result = asyncio.run(
        main.annotate_file(
            src,
            out,
            Settings(render_scale=0.5, page_format="a5"),
            strokes=[{"page": 2, "points": [[10, 10], [200, 200]]}],
        )
    )

    assert result == {"output_path": out, "pages": 3, "strokes": 1}
    doc = fitz.open(out)
    assert [(round(p.rect.width), round(p.rect.height)) for p in doc] == [(595, 842), (420, 595), (420, 595)]
    doc.close()


def test_annotate_file_missing_input(tmp_path):
    with pytest.raises(FileNotFoundError):
        asyncio.run(main.annotate_file(str(tmp_path / "nope.pdf"), str(tmp_path / "out.pdf"), Settings()))
