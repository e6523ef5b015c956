#!/usr/bin/env python3
"""
Command-line interface for the PRD mockup generation pipeline.
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from prd_mockups.io.document_loader import ArtifactManager, DocumentLoader
from prd_mockups.pipeline.generation import GeneratorSettings
from prd_mockups.pipeline.parsing import DesignExtractor
from prd_mockups.service import RequestService
from prd_mockups.utils.llm_logger import get_logger

# Load environment variables
load_dotenv()


def cmd_generate(args):
    """Generate HTML mockups from a requirements document and/or description."""
    print("🚀 Generating HTML mockups...")

    document = None
    if args.file:
        file_path = Path(args.file)
        if not file_path.exists():
            print(f"❌ Error: Document not found: {file_path}")
            return 1
        document = DocumentLoader().load_document(file_path, content_type=args.content_type)
        print(f"📄 Document: {file_path} ({document.size:,} bytes)")

    context = args.context or ""
    if args.context_file:
        context = Path(args.context_file).read_text(encoding="utf-8")
    if context.strip():
        print(f"📝 Description: {len(context.strip())} chars")

    settings = GeneratorSettings.from_env(
        provider=args.provider,
        model_name=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        max_document_chars=args.max_document_chars
    )
    run_id = args.run_id or f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

    # Call logs land next to the designs; level falls back to LLM_DEBUG_LEVEL.
    get_logger().configure(level=args.log_level, log_dir=args.output)

    print(f"📁 Run ID: {run_id}")
    print(f"🤖 Using {settings.provider}/{settings.model_name or 'default'}")

    service = RequestService(settings=settings)
    response = service.handle(document, context, run_id=run_id)

    if not response.success:
        print(f"❌ Generation failed ({response.status_code}): {response.error}")
        return 1

    artifact_manager = ArtifactManager(args.output)
    html_paths = artifact_manager.save_designs(run_id, response.designs)
    if args.save_raw and response.raw_text is not None:
        raw_path = artifact_manager.save_raw_response(run_id, response.raw_text)
        print(f"🗒️  Raw response: {raw_path}")

    log_path = artifact_manager.create_run_directory(run_id) / "generation_log.json"
    log_path.write_text(
        response.model_dump_json(indent=2, exclude={"raw_text", "designs"}),
        encoding="utf-8"
    )

    print(f"✅ {len(response.designs)} design(s) generated!")
    for design, path in zip(response.designs, html_paths):
        print(f"   [{design.id}] {design.title}: {path}")
    print(f"📊 Tokens: {response.prompt_tokens} prompt, {response.completion_tokens} completion")

    return 0


def cmd_extract(args):
    """Extract designs from a saved raw model response."""
    print("🔍 Extracting designs from raw response...")

    raw_path = Path(args.raw)
    if not raw_path.exists():
        print(f"❌ Error: Raw response not found: {raw_path}")
        return 1

    artifact_manager = ArtifactManager(args.output)
    raw_text = artifact_manager.load_raw_response(raw_path)
    designs = DesignExtractor().extract(raw_text)

    run_id = args.run_id or raw_path.stem
    html_paths = artifact_manager.save_designs(run_id, designs)

    if args.json:
        print(json.dumps([d.model_dump() for d in designs], indent=2, ensure_ascii=False))

    print(f"✅ {len(designs)} design(s) extracted:")
    for design, path in zip(designs, html_paths):
        print(f"   [{design.id}] {design.title}: {path}")

    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate interactive HTML mockups from product requirement documents",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate HTML mockups from a PRD")
    gen_parser.add_argument("--file", "-f", help="Requirements document (.docx, .pdf or image)")
    gen_parser.add_argument("--content-type", help="Declared content type of the document")
    gen_parser.add_argument("--context", "-c", help="Supplementary description")
    gen_parser.add_argument("--context-file", help="Read the supplementary description from a file")
    gen_parser.add_argument("--output", "-o", default="outputs", help="Output directory")
    gen_parser.add_argument("--run-id", "-r", help="Run identifier (default: timestamp)")
    gen_parser.add_argument("--provider", "-p", choices=["anthropic", "openai"])
    gen_parser.add_argument("--model", help="Model name (default: provider default)")
    gen_parser.add_argument("--temperature", type=float, help="Generation temperature")
    gen_parser.add_argument("--max-tokens", type=int, help="Maximum tokens")
    gen_parser.add_argument("--max-document-chars", type=int,
                            help="Limit on text extracted from Word documents (0 = no limit)")
    gen_parser.add_argument("--save-raw", action="store_true", help="Also save the raw model response")
    gen_parser.add_argument("--log-level", choices=["NONE", "INFO", "DEBUG", "TRACE"],
                            help="LLM call logging level (default: LLM_DEBUG_LEVEL)")

    # Extract command
    ext_parser = subparsers.add_parser("extract", help="Extract designs from a saved raw response")
    ext_parser.add_argument("--raw", required=True, help="Path to raw model response")
    ext_parser.add_argument("--output", "-o", default="outputs", help="Output directory")
    ext_parser.add_argument("--run-id", "-r", help="Run identifier (default: raw file name)")
    ext_parser.add_argument("--json", action="store_true", help="Print the designs as JSON")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "generate":
            return cmd_generate(args)
        elif args.command == "extract":
            return cmd_extract(args)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        return 130
    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
