#!/usr/bin/env python3
"""CLI wrapper for brand identity generation.

Usage:
    python brand_cli.py --industry HealthTech --audience "Professional Developers" \\
        --description "Async standups for remote clinics" --tone Professional
    python brand_cli.py ... --quiz --logos --output-dir cli_output
    python brand_cli.py ... --logos --direct     # render logos without the relay
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, Optional

import log_setup
from brand_core import BrandGenerator
from config import Settings
from errors import ConfigurationError, GenerationError, InvalidInputError, LogoError
from logo_client import LogoClient
from logo_core import LogoRenderer, decode_data_uri, image_backend
from models import BrandInputs, BrandResult, Tone
from quiz import BrandQuiz


def main(argv: Optional[list] = None, settings: Optional[Settings] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate a brand identity (names, taglines, persona, voice, palette, social kit)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python brand_cli.py --industry HealthTech --audience "Professional Developers" --description "..."
  python brand_cli.py --industry Fashion --audience "Gen Z" --description "..." --tone Playful --quiz
""",
    )
    parser.add_argument("--industry", required=True, help="Industry, e.g. HealthTech")
    parser.add_argument("--audience", required=True, help="Target audience")
    parser.add_argument("--description", required=True, help="What are you building?")
    parser.add_argument(
        "--tone",
        choices=[t.value for t in Tone],
        default=Tone.PROFESSIONAL.value,
        help="Brand tone (default: Professional)",
    )
    parser.add_argument("--quiz", action="store_true", help="Answer the brand personality quiz first")
    parser.add_argument("--logos", action="store_true", help="Render one logo per brand name")
    parser.add_argument("--direct", action="store_true", help="Render logos in-process instead of via the relay")
    parser.add_argument("--output-dir", default=None, help="Save brand JSON and logos here")
    parser.add_argument("--json", action="store_true", help="Print full JSON result to stdout")

    args = parser.parse_args(argv)
    settings = settings or Settings.from_env()
    log_setup.configure(settings.log_level, component="cli")

    inputs = BrandInputs(
        industry=args.industry,
        target_audience=args.audience,
        business_description=args.description,
        tone=args.tone,
    )

    if args.quiz:
        summary = run_quiz(input)
        if summary is None:
            _echo("  – Quiz skipped")
        else:
            inputs = inputs.model_copy(update={"personality_summary": summary})

    _echo("\n  ✦ BrandCraft CLI")
    _echo(f"  Industry: {inputs.industry}")
    _echo(f"  Audience: {inputs.target_audience}")
    _echo(f"  Tone    : {inputs.tone.value}")
    _echo(f"  LLM     : {settings.text_provider}/{settings.text_model}\n")

    t0 = time.time()
    try:
        result = BrandGenerator(settings).generate_brand_identity(inputs)
    except (ConfigurationError, InvalidInputError) as exc:
        print(f"✗  {exc}", file=sys.stderr)
        return 2
    except GenerationError as exc:
        print(f"\n✗  {exc}", file=sys.stderr)
        return 1

    _summarize(result, time.time() - t0)

    output_dir = Path(args.output_dir) if args.output_dir else None
    if output_dir:
        output_dir.mkdir(parents=True, exist_ok=True)
        (output_dir / "brand.json").write_text(json.dumps(result.to_wire(), indent=2), encoding="utf-8")
        _echo(f"  ✓ Saved {output_dir / 'brand.json'}")

    if args.json:
        print(json.dumps(result.to_wire(), indent=2))

    failures = 0
    if args.logos:
        if args.direct:
            render = LogoRenderer(image_backend(settings)).render
        else:
            render = LogoClient(settings.relay_url, timeout=settings.request_timeout).generate_logo
        try:
            logos = render_logos(result, inputs, render)
        except ConfigurationError as exc:
            print(f"✗  {exc}", file=sys.stderr)
            return 2
        for name, outcome in logos.items():
            if isinstance(outcome, LogoError):
                failures += 1
                _echo(f"  ✗ {name}: {outcome.user_message} ({outcome.reason})")
                continue
            if output_dir:
                path = save_logo(output_dir, name, outcome)
                _echo(f"  ✓ {name}: {path}")
            else:
                _echo(f"  ✓ {name}: {len(outcome)} chars")

    return 1 if failures else 0


def run_quiz(ask: Callable[[str], str]) -> Optional[str]:
    """Walk the quiz on the terminal; returns the summary or None if abandoned."""
    completed: Dict[str, str] = {}
    quiz = BrandQuiz(on_complete=lambda summary: completed.setdefault("summary", summary))

    while quiz.current is not None:
        question = quiz.current
        _echo(f"\n  Step {quiz.index + 1} of {len(quiz.questions)} — {question.question}")
        for i, opt in enumerate(question.options, start=1):
            _echo(f"    {i}. {opt.label} — {opt.description}")
        choice = ask("  Choose (q to skip): ").strip().lower()
        if choice == "q":
            quiz.close()
            return None
        if not choice.isdigit() or not 1 <= int(choice) <= len(question.options):
            _echo("  ⚠ Pick one of the numbers above")
            continue
        quiz.select(question.options[int(choice) - 1].value)

    return completed.get("summary")


def render_logos(
    result: BrandResult,
    inputs: BrandInputs,
    render: Callable[[str, str, str], str],
    max_workers: int = 5,
) -> Dict[str, object]:
    """Render every brand name's logo concurrently; each name gets an image or its LogoError."""
    outcomes: Dict[str, object] = {}
    names = result.names()
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(names) or 1))) as pool:
        futures = {
            pool.submit(render, name, inputs.industry, inputs.tone.value): name
            for name in names
        }
        for future in as_completed(futures):
            name = futures[future]
            try:
                outcomes[name] = future.result()
            except LogoError as exc:
                outcomes[name] = exc
    return {name: outcomes[name] for name in names}


def save_logo(output_dir: Path, name: str, image: str) -> Path:
    mime, data = decode_data_uri(image)
    safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in name)
    path = output_dir / f"{safe}-logo.{mime.split('/')[-1]}"
    path.write_bytes(data)
    return path


def _summarize(result: BrandResult, duration: float) -> None:
    _echo("  ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")
    _echo(f"  Names    : {', '.join(result.names())}")
    _echo(f"  Tagline  : {result.taglines[0] if result.taglines else ''}")
    _echo(f"  Archetype: {result.personality_profile.archetype}")
    _echo(f"  Palette  : {' '.join(c.hex for c in result.color_palette)}")
    _echo(f"  Duration : {duration:.1f}s\n")


def _echo(msg: str) -> None:
    print(msg, flush=True)


if __name__ == "__main__":
    raise SystemExit(main())
