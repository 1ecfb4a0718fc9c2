"""
Main entry point for PHP scaffold generation.

Pipeline:
    [PHASE 1] load + validate the OpenAPI document
    [PHASE 2] extract operations, schemas and security into the model
    [PHASE 3] plan artifacts for the selected framework
    [PHASE 4] render templates
    [PHASE 5] write files (ignore file, skip-existing, dry-run)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .config import GeneratorConfig
from .frameworks import get_profile
from .gen_logging import get_logger
from .generators import TemplateRenderer, WriteReport, plan_artifacts, render_artifacts, write_artifacts
from .generators.artifacts import Artifact
from .spec import extract_document, load_openapi_spec
from .spec.model import ApiDocument

logger = get_logger(__name__)


@dataclass
class GenerationResult:
    document: ApiDocument
    artifacts: List[Artifact]
    rendered: Dict[str, str]
    report: WriteReport
    out_dir: Path
    dry_run: bool = False

    def counts_by_kind(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for artifact in self.artifacts:
            counts[artifact.kind] = counts.get(artifact.kind, 0) + 1
        return counts


def generate_project(spec_path, out_dir, config: Optional[GeneratorConfig] = None) -> GenerationResult:
    """
    Generate a PHP scaffold for `spec_path` into `out_dir`.

    Args:
        spec_path: OpenAPI 3.0/3.1 document (YAML or JSON)
        out_dir: Project root the generated files are written below
        config: Generator configuration; defaults to Laravel under App\\

    Returns:
        GenerationResult with the planned artifacts, rendered sources and
        what the writer did with each file.
    """
    config = (config or GeneratorConfig()).validated()
    profile = get_profile(config.framework)
    out_dir = Path(out_dir)

    logger.info("\n" + "=" * 70)
    logger.info(f"  GENERATING {profile.label.upper()} SCAFFOLD")
    logger.info("=" * 70)

    logger.info(f"\n[PHASE 1] Loading {spec_path}...")
    raw = load_openapi_spec(Path(spec_path))

    logger.info("\n[PHASE 2] Extracting operations and schemas...")
    document = extract_document(raw)
    logger.info(
        f"  {document.title} {document.version}: {len(document.operations)} operation(s), "
        f"{len(document.object_schemas())} object schema(s), {len(document.enum_schemas())} enum(s)"
    )

    logger.info(f"\n[PHASE 3] Planning artifacts for {profile.label}...")
    artifacts = plan_artifacts(document, profile, config)
    logger.info(f"  {len(artifacts)} artifact(s) planned")

    logger.info("\n[PHASE 4] Rendering templates...")
    renderer = TemplateRenderer(profile, config.templates_dir)
    rendered = render_artifacts(artifacts, renderer)

    logger.info(f"\n[PHASE 5] Writing files to {out_dir}{' (dry run)' if config.dry_run else ''}...")
    report = write_artifacts(
        rendered,
        out_dir,
        skip_existing=config.skip_existing,
        dry_run=config.dry_run,
    )
    logger.info(
        f"  written: {len(report.written)}, unchanged: {len(report.unchanged)}, "
        f"ignored: {len(report.ignored)}, kept existing: {len(report.existing)}"
    )

    logger.info("\n" + "=" * 70)
    logger.info("  GENERATION COMPLETE")
    logger.info("=" * 70 + "\n")

    return GenerationResult(
        document=document,
        artifacts=artifacts,
        rendered=rendered,
        report=report,
        out_dir=out_dir,
        dry_run=config.dry_run,
    )
