from __future__ import annotations

import argparse
from typing import List, Tuple

import fitz  # PyMuPDF

SIZES = {"a4": (595, 842), "letter": (612, 792), "a5": (420, 595)}


def make_sample_pdf(sizes: List[Tuple[float, float]]) -> bytes:
    """Build a PDF with one labelled page per size, for trying the CLI."""
    doc = fitz.open()
    try:
        for number, (width, height) in enumerate(sizes, start=1):
            page = doc.new_page(width=width, height=height)
            page.draw_rect(fitz.Rect(36, 36, width - 36, height - 36), color=(0.6, 0.6, 0.6), width=1)
            page.insert_text((72, 96), f"Page {number}", fontsize=36)
            page.insert_text((72, 130), f"{width:.0f} x {height:.0f} pt", fontsize=14)
        return doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Write a labelled multi-page sample PDF.")
    parser.add_argument("--out", "-o", default="sample.pdf")
    parser.add_argument("--pages", "-n", type=int, default=3)
    parser.add_argument("--size", choices=sorted(SIZES), default="a4")
    args = parser.parse_args()

    data = make_sample_pdf([SIZES[args.size]] * max(1, args.pages))
    with open(args.out, "wb") as f:
        f.write(data)
    print(f"Wrote {args.out} ({args.pages} page(s))")


if __name__ == "__main__":
    main()
