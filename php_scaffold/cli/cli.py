from pathlib import Path
import traceback

import click

from datetime import date
from rich import pretty
from rich.console import Console
from rich.table import Table

from php_scaffold import __version__
from php_scaffold.checklist import evaluate_output
from php_scaffold.config import GeneratorConfig, load_config
from php_scaffold.errors import ScaffoldError
from php_scaffold.frameworks import available_frameworks, get_profile
from php_scaffold.gen_logging import configure_gen_logging
from php_scaffold.generate import generate_project
from php_scaffold.mapping import SchemaGraph, referenced_schemas
from php_scaffold.spec import load_document

pretty.install()
console = Console()


def stamp() -> str:
    return f"[{date.today().strftime('%Y-%m-%d')}]"


def build_config(config_path, **overrides) -> GeneratorConfig:
    """Config file (if any) overlaid with the CLI options that were given."""
    config = load_config(config_path) if config_path else GeneratorConfig()
    return config.merged(**overrides)


def safe_label(text: str, max_len=40) -> str:
    """Shorten and escape text for a GraphViz record label."""
    text = " ".join(str(text or "").split())
    if len(text) > max_len:
        text = text[: max_len - 3] + "..."
    for ch in "{}<>|\"":
        text = text.replace(ch, "\\" + ch)
    return text


@click.group()
@click.version_option(__version__, prog_name="php-scaffold")
@click.pass_context
def cli(context):
    context.ensure_object(dict)


@cli.command("validate", help="Validate an OpenAPI document.")
@click.pass_context
@click.argument("spec_path")
def validate(context, spec_path):
    try:
        document = load_document(spec_path)
        console.print(
            f"{stamp()} OpenAPI validation success! {len(document.operations)} operation(s), "
            f"{len(document.schemas)} schema(s)",
            style="green",
        )
    except ScaffoldError as e:
        console.print(f"{stamp()} Validation failed with error(s): {e}", style="red")
        context.exit(1)
    else:
        context.exit(0)


@cli.command("inspect", help="Parse and print a summary of the document (operations, schemas).")
@click.pass_context
@click.argument("spec_path")
def inspect_cmd(context, spec_path):
    try:
        document = load_document(spec_path)
        console.print(f"{stamp()} OpenAPI validation success!", style="green")

        console.print(f"\n{document.title} {document.version} (OpenAPI {document.openapi_version})", style="bold")
        for server in document.servers:
            console.print(f"  server: {server}")

        operations = Table(title="Operations")
        operations.add_column("Method")
        operations.add_column("Path")
        operations.add_column("Tag")
        operations.add_column("PHP method")
        operations.add_column("Status")
        operations.add_column("Security")
        for op in document.operations:
            operations.add_row(
                op.http_method, op.path, op.tag_class, op.method_name,
                str(op.success_status), ", ".join(op.security),
            )
        console.print(operations)

        schemas = Table(title="Schemas")
        schemas.add_column("Schema")
        schemas.add_column("Class")
        schemas.add_column("Kind")
        schemas.add_column("Source")
        schemas.add_column("Properties", justify="right")
        for schema in document.schemas.values():
            schemas.add_row(
                schema.name, schema.class_name, schema.kind, schema.source,
                str(len(schema.properties)),
            )
        console.print(schemas)

        cycles = SchemaGraph(document).cycles()
        for cycle in cycles:
            console.print(f"  circular reference: {' -> '.join(cycle)}", style="yellow")
    except ScaffoldError as e:
        console.print(f"{stamp()} Inspect failed with error(s): {e}", style="red")
        context.exit(1)
    else:
        context.exit(0)


@cli.command("generate", help="Emit PHP framework boilerplate for an OpenAPI document.")
@click.pass_context
@click.argument("spec_path")
@click.option(
    "--framework", "-f",
    type=click.Choice(available_frameworks(), case_sensitive=False),
    default=None,
    help="Target framework (default: laravel, or the config file's).",
)
@click.option("--out", "out_dir", default="generated", help="Output directory (default: ./generated)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML/JSON config file")
@click.option("--templates", "templates_dir", type=click.Path(file_okay=False), help="Template override directory")
@click.option("--namespace", "root_namespace", default=None, help="Root PHP namespace (default: App)")
@click.option("--php-version", default=None, help="Target PHP version (8.1+)")
@click.option("--skip", "skip", multiple=True, help="Artifact kind to skip (repeatable)")
@click.option("--skip-existing", is_flag=True, default=False, help="Keep files that already exist")
@click.option("--dry-run", is_flag=True, default=False, help="Render but do not write files")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Per-file output")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Warnings and errors only")
def generate(context, spec_path, framework, out_dir, config_path, templates_dir, root_namespace,
             php_version, skip, skip_existing, dry_run, verbose, quiet):
    configure_gen_logging(verbose=verbose, quiet=quiet)
    try:
        config = build_config(
            config_path,
            framework=framework,
            root_namespace=root_namespace,
            php_version=php_version,
            templates_dir=templates_dir,
            skip_artifacts=list(skip) or None,
            skip_existing=skip_existing or None,
            dry_run=dry_run or None,
        )
        out_path = Path(out_dir).resolve()
        result = generate_project(spec_path, out_path, config)

        summary = Table(title=f"{get_profile(config.framework).label} artifacts")
        summary.add_column("Kind")
        summary.add_column("Files", justify="right")
        for kind, count in result.counts_by_kind().items():
            summary.add_row(kind, str(count))
        console.print(summary)

        report = result.report
        if result.dry_run:
            for path in report.written:
                console.print(f"  would write {path}")
            console.print(f"{stamp()} Dry run: {len(report.written)} file(s) would be written to: {out_path}", style="yellow")
        else:
            console.print(
                f"{stamp()} {len(report.written)} file(s) written, {len(report.unchanged)} unchanged, "
                f"{len(report.ignored)} ignored, {len(report.existing)} kept",
                style="green",
            )
            console.print(f"{stamp()} Scaffold emitted to: {out_path}", style="green")
    except ScaffoldError as e:
        console.print(f"{stamp()} Generate failed with error(s): {e}", style="red")
        context.exit(1)
    except Exception as e:
        console.print(f"{stamp()} Generate failed with error(s): {e}", style="red")
        tb_lines = traceback.format_exc().splitlines()
        console.print("\n".join(tb_lines[-50:]), style="red")
        context.exit(1)
    else:
        context.exit(0)


@cli.command("check", help="Score generated output against the OpenAPI document.")
@click.pass_context
@click.argument("spec_path")
@click.argument("out_dir", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--framework", "-f",
    type=click.Choice(available_frameworks(), case_sensitive=False),
    default=None,
    help="Framework the output was generated for (default: laravel, or the config file's).",
)
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML/JSON config file")
@click.option("--min-score", type=click.FloatRange(0.0, 1.0), default=1.0, show_default=True,
              help="Fail below this fraction of passed checks")
def check(context, spec_path, out_dir, framework, config_path, min_score):
    try:
        config = build_config(config_path, framework=framework)
        document = load_document(spec_path)
        report = evaluate_output(document, get_profile(config.framework), Path(out_dir), config)

        table = Table(title="Checklist")
        table.add_column("Category")
        table.add_column("Passed", justify="right")
        for category, items in report.by_category().items():
            passed = sum(1 for item in items if item.passed)
            table.add_row(category, f"{passed}/{len(items)}")
        console.print(table)

        for item in report.failed:
            console.print(f"  [FAIL] {item.category}: {item.subject} - {item.requirement} ({item.detail})", style="red")
    except ScaffoldError as e:
        console.print(f"{stamp()} Check failed with error(s): {e}", style="red")
        context.exit(1)
    else:
        if report.score < min_score:
            console.print(f"{stamp()} Score {report.score:.2%} is below {min_score:.2%}", style="red")
            context.exit(1)
        console.print(f"{stamp()} Score {report.score:.2%}", style="green")
        context.exit(0)


@cli.command("frameworks", help="List the available framework profiles.")
@click.pass_context
def frameworks_cmd(context):
    table = Table(title="Frameworks")
    table.add_column("Name")
    table.add_column("Label")
    table.add_column("Source dir")
    table.add_column("Rules")
    table.add_column("Artifacts")
    for name in available_frameworks():
        profile = get_profile(name)
        table.add_row(name, profile.label, profile.src_dir, profile.rule_dialect, ", ".join(profile.kinds))
    console.print(table)
    context.exit(0)


@cli.command("visualize", help="Diagram tags, operations and schemas of a document with GraphViz.")
@click.pass_context
@click.argument("spec_path")
@click.option("--output", "-o", "output_dir", default="docs", help="Output directory for PNG/DOT files (default: docs)")
def visualize_cmd(context, spec_path, output_dir):
    try:
        from graphviz import Digraph

        document = load_document(spec_path)
        graph = SchemaGraph(document)

        dot = Digraph(comment=f"{document.title} {document.version}")
        dot.attr(rankdir="LR", fontname="Helvetica")
        dot.attr("node", fontname="Helvetica", fontsize="10")

        # -------------------------------
        # Tags and operations
        # -------------------------------
        for tag_class, operations in document.operations_by_tag().items():
            dot.node(f"tag_{tag_class}", safe_label(tag_class), shape="folder",
                     style="filled", fillcolor="#e3f2fd")
            for op in operations:
                dot.node(f"op_{op.operation_id}", safe_label(f"{op.http_method} {op.path}"),
                         shape="box", style="rounded,filled", fillcolor="#fff8e1")
                dot.edge(f"tag_{tag_class}", f"op_{op.operation_id}")

        # -------------------------------
        # Schemas
        # -------------------------------
        for name, schema in document.schemas.items():
            if schema.is_enum:
                label = safe_label(f"{schema.class_name} (enum)")
                dot.node(f"schema_{name}", label, shape="ellipse", style="filled", fillcolor="#f3e5f5")
            else:
                dot.node(f"schema_{name}", safe_label(schema.class_name), shape="box",
                         style="filled", fillcolor="#e8f5e9" if schema.source == "component" else "#f1f8e9")

        for source, target in graph.graph.edges:
            dot.edge(f"schema_{source}", f"schema_{target}", color="#616161")

        for op in document.operations:
            if op.request_body is not None:
                for name in sorted(referenced_schemas(op.request_body.field, document)):
                    dot.edge(f"op_{op.operation_id}", f"schema_{name}", label="body", color="#1565c0")
            response = op.success_response
            if response is not None and response.field is not None:
                for name in sorted(referenced_schemas(response.field, document)):
                    dot.edge(f"op_{op.operation_id}", f"schema_{name}", label=response.status,
                             color="#2e7d32", style="dashed")

        # -------------------------------
        # Output
        # -------------------------------
        out_path = Path(output_dir).resolve()
        out_path.mkdir(exist_ok=True, parents=True)

        file_base = out_path / f"{Path(spec_path).stem}_diagram"
        png_file = Path(f"{file_base}.png")
        dot_file = Path(f"{file_base}.dot")
        base_file = Path(f"{file_base}")  # graphviz also writes the source without extension

        # Fall back to the .dot source when the 'dot' executable is missing
        try:
            dot.render(str(file_base), format="png", cleanup=False)
            if base_file.exists():
                base_file.unlink()
            console.print(f"{stamp()} Diagram written to: {png_file}", style="green")
        except Exception:
            dot.save(str(dot_file))
            console.print(
                f"{stamp()} GraphViz 'dot' executable not found. Saved DOT file to: {dot_file}",
                style="yellow",
            )
            console.print(
                f"To generate PNG: Install GraphViz (https://graphviz.org/download/) and run: "
                f"dot -Tpng {dot_file} -o {png_file}",
                style="yellow",
            )
    except ScaffoldError as e:
        console.print(f"{stamp()} Visualization failed with: {e}", style="red")
        context.exit(1)
    else:
        context.exit(0)


def main():
    cli(prog_name="php-scaffold")
