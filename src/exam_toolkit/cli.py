"""
Module: cli

Purpose:
    Command line entry point.

    exam-toolkit segment PDF -o DIR     Segment a paper, store questions in DIR
    exam-toolkit segment MEMO -o DIR --memo
                                        Attach memo answers to stored questions
    exam-toolkit render PDF --page N -o PNG
    exam-toolkit crop PDF --page N --rect X Y W H [--rect ...] -o PNG

Exit codes: 0 success (including "no questions detected"), 1 usage or
argument error, 2 the input could not be opened as a PDF.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from exam_toolkit import __version__
from exam_toolkit.core.models import Coordinates, CropRect, ExtractedQuestion
from exam_toolkit.correction import CropSession
from exam_toolkit.persistence import DirectorySink, commit_answers, commit_questions
from exam_toolkit.segmenter import (
    DocumentOpenError,
    SegmentationConfig,
    open_document,
    segment_question_paper,
)
from exam_toolkit.segmenter.source import DocumentSource

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_OPEN_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="exam-toolkit", description="Split exam PDFs into per-question images.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    seg = sub.add_parser("segment", help="Segment a question paper or memo")
    seg.add_argument("pdf", type=Path)
    seg.add_argument("-o", "--output", type=Path, required=True, help="Question store directory")
    seg.add_argument("--memo", action="store_true", help="Attach results as answers to stored questions")
    seg.add_argument("--reference-scale", type=float, default=None)
    seg.add_argument("--ocr-scale", type=float, default=None)
    seg.add_argument("--max-ocr-pages", type=int, default=None)
    seg.add_argument("--no-ocr", action="store_true", help="Never run optical recognition")
    seg.add_argument("--lenient-headers", action="store_true", help="Accept any line containing a header keyword")
    seg.add_argument("--diagnostics", type=Path, default=None, help="Write a diagnostics JSON report")
    seg.add_argument("--timing", action="store_true", help="Log a timing summary")

    ren = sub.add_parser("render", help="Render one page to an image")
    ren.add_argument("pdf", type=Path)
    ren.add_argument("--page", type=int, required=True, help="1-indexed page")
    ren.add_argument("--scale", type=float, default=1.6)
    ren.add_argument("-o", "--output", type=Path, required=True)

    crop = sub.add_parser("crop", help="Crop and stitch rectangles of one page")
    crop.add_argument("pdf", type=Path)
    crop.add_argument("--page", type=int, required=True, help="1-indexed page")
    crop.add_argument("--scale", type=float, default=1.6)
    crop.add_argument(
        "--rect",
        type=float,
        nargs=4,
        action="append",
        required=True,
        metavar=("X", "Y", "W", "H"),
        help="Rectangle in rendered pixels; repeat to stitch several",
    )
    crop.add_argument("-o", "--output", type=Path, required=True)

    return parser


def config_from_args(args: argparse.Namespace) -> SegmentationConfig:
    """Map command line flags onto SegmentationConfig overrides."""
    config = SegmentationConfig()
    if args.reference_scale is not None:
        config = replace(config, reference_scale=args.reference_scale)
    ocr = config.ocr
    if args.ocr_scale is not None:
        ocr = replace(ocr, scale=args.ocr_scale)
    if args.max_ocr_pages is not None:
        ocr = replace(ocr, max_pages=args.max_ocr_pages)
    if args.no_ocr:
        ocr = replace(ocr, enabled=False)
    headers = replace(config.headers, strict=not args.lenient_headers)
    return replace(config, ocr=ocr, headers=headers)


def cmd_segment(args: argparse.Namespace) -> int:
    config = config_from_args(args)
    result = segment_question_paper(args.pdf, config=config, progress=print)

    if args.diagnostics is not None and result.diagnostics is not None:
        result.diagnostics.save(args.diagnostics)
    if args.timing:
        logger.info(result.timing.summary())

    if result.is_empty:
        print(f"No questions detected in {args.pdf.name}. Check the file or add questions manually.")
        return EXIT_OK

    sink = DirectorySink(args.output)
    if args.memo:
        outcome = commit_answers(result.questions, sink.stored_questions(), sink)
        print(f"Attached {len(outcome.committed)} answers to questions in {args.output}")
        for answer in outcome.unmatched:
            print(f"  unmatched: answer {answer.number}")
        return EXIT_OK

    ids = commit_questions(result.questions, sink, existing_count=len(sink))
    print(f"Saved {len(ids)} questions to {args.output}")
    return EXIT_OK


def cmd_render(args: argparse.Namespace) -> int:
    with open_document(args.pdf) as source:
        if not 1 <= args.page <= source.page_count:
            print(f"Page {args.page} out of range 1..{source.page_count}", file=sys.stderr)
            return EXIT_USAGE
        image = source.render(args.page, args.scale)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    image.save(args.output)
    print(f"Rendered page {args.page} ({image.width}x{image.height}) to {args.output}")
    return EXIT_OK


def run_crop(source: DocumentSource, page: int, rects: Sequence[Sequence[float]], scale: float = 1.6):
    """
    Drive a crop session: one Add Slice per rectangle but the last, then Save.

    Returns:
        The stitched image.
    """
    item = ExtractedQuestion(number=1, text="", image=None, page=page, coordinates=Coordinates(0.0, 0.0))
    session = CropSession(source, item, render_scale=scale)
    for rect in rects[:-1]:
        session.set_rect(CropRect(*rect))
        session.add_slice()
    session.set_rect(CropRect(*rects[-1]))
    return session.save().image


def cmd_crop(args: argparse.Namespace) -> int:
    with open_document(args.pdf) as source:
        try:
            image = run_crop(source, args.page, args.rect, args.scale)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return EXIT_USAGE
    args.output.parent.mkdir(parents=True, exist_ok=True)
    image.save(args.output)
    print(f"Saved {len(args.rect)} slice(s) ({image.width}x{image.height}) to {args.output}")
    return EXIT_OK


COMMANDS = {
    "segment": cmd_segment,
    "render": cmd_render,
    "crop": cmd_crop,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return COMMANDS[args.command](args)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        return EXIT_OPEN_FAILED
    except DocumentOpenError as e:
        print(f"Invalid file: {e}", file=sys.stderr)
        return EXIT_OPEN_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
