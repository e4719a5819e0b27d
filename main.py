#!/usr/bin/env python3
"""
SISMA Inspection Assistant - command line front end

- checklist: validate a checklist JSON, compute compliance, generate the report
  (AI generator, or a local fallback report if the generator fails)
- ask: free-text question to the normative assistant
- image: simulated hazard detection on an inspection photo
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from sisma.assistant import NormativeAssistant
from sisma.checklist import ChecklistEvaluator
from sisma.config import SismaConfig, configure_logging
from sisma.errors import AssistantError, ChecklistValidationError, ConfigurationError, ImageAnalysisError
from sisma.export import export_report_json, export_report_markdown, report_to_json
from sisma.image_analysis import MockImageAnalyzer, annotate_image
from sisma.llm_analysis import build_report_generator, build_responder

EXIT_VALIDATION = 2


def run_checklist(args, config: SismaConfig) -> int:
    checklist_path = Path(args.file)
    if not checklist_path.exists():
        print(f"Error: File not found: {checklist_path}", file=sys.stderr)
        return 1

    print(f"Processing checklist: {checklist_path}")
    print(f"Generator: {config.provider}")
    print()

    evaluator = ChecklistEvaluator(build_report_generator(config))
    try:
        evaluation = evaluator.evaluate(checklist_path.read_text(encoding="utf-8"))
    except ChecklistValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION

    report = evaluation.report
    output_json = report_to_json(report)

    if args.output:
        export_report_json(report, args.output)
        print(f"Report saved to: {args.output}")
    else:
        print("=" * 80)
        print("INSPECTION REPORT")
        print("=" * 80)
        print(output_json)

    if args.markdown:
        export_report_markdown(report, args.markdown, evaluation.compliance)
        print(f"Markdown summary saved to: {args.markdown}")

    print("\n" + "=" * 80)
    print("SUMMARY")
    print("=" * 80)
    print(f"Compliance: {evaluation.compliance:.2f}%")
    print(f"Report source: {evaluation.provider}")
    print(f"Non-conformities: {len(report.non_conformities)}")
    for nc in report.non_conformities:
        print(f"  - [{nc.severity.value}] {nc.question_id}: {nc.suggested_action}")
    if evaluation.fallback:
        print("\nWARNING: the AI generator was unavailable; this is a fallback report.")
    return 0


def run_ask(args, config: SismaConfig) -> int:
    assistant = NormativeAssistant(build_responder(config))
    try:
        print(assistant.ask(args.question))
    except AssistantError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def run_image(args, config: SismaConfig) -> int:
    image_path = Path(args.file)
    if not image_path.exists():
        print(f"Error: File not found: {image_path}", file=sys.stderr)
        return 1

    image_bytes = image_path.read_bytes()
    analyzer = MockImageAnalyzer(delay=config.image_analysis_delay)
    try:
        result = analyzer.analyze(image_bytes)
    except ImageAnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

    if args.annotated:
        Path(args.annotated).write_bytes(annotate_image(image_bytes, result.detections))
        print(f"Annotated image saved to: {args.annotated}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SISMA Inspection Assistant - normative Q&A, image screening and checklist reports"
    )
    parser.add_argument('--provider', type=str, choices=['gemini', 'openai', 'offline'], default=None,
                        help='Generative backend (default: SISMA_PROVIDER or gemini)')
    # --provider is accepted before or after the subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--provider', type=str, choices=['gemini', 'openai', 'offline'],
                        default=argparse.SUPPRESS, help='Generative backend')
    sub = parser.add_subparsers(dest='command', required=True)

    p_check = sub.add_parser('checklist', parents=[common], help='Process a checklist JSON file')
    p_check.add_argument('file', type=str, help='Path to checklist .json file')
    p_check.add_argument('--output', type=str, help='Output JSON file path (default: stdout)')
    p_check.add_argument('--markdown', type=str, help='Also write a Markdown summary to this path')
    p_check.set_defaults(func=run_checklist)

    p_ask = sub.add_parser('ask', parents=[common], help='Ask the normative assistant a question')
    p_ask.add_argument('question', type=str, help='Question text')
    p_ask.set_defaults(func=run_ask)

    p_image = sub.add_parser('image', parents=[common], help='Run simulated hazard detection on a photo')
    p_image.add_argument('file', type=str, help='Path to PNG/JPEG image')
    p_image.add_argument('--annotated', type=str, help='Write the image with detection boxes to this path')
    p_image.set_defaults(func=run_image)

    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = SismaConfig.from_env()
        if args.provider:
            config = config.model_copy(update={"provider": args.provider})
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.log_level)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
