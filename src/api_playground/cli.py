"""CLI entry point for api-playground."""

import json
import logging
from pathlib import Path

import click

from api_playground.config import Settings
from api_playground.converter.document import convert
from api_playground.converter.models import ConversionResult
from api_playground.errors import RequestBuildError
from api_playground.parser.reader import load_paths
from api_playground.render.markdown import render_markdown
from api_playground.runner.mock import MockBackend
from api_playground.runner.session import PlaygroundSession


def _convert_paths(paths: tuple[Path, ...], settings: Settings) -> ConversionResult:
    """Load and convert spec files/directories, reporting document errors."""
    documents = load_paths(list(paths), require_openapi=settings.require_openapi_key)
    result = convert(documents)
    for error in result.errors:
        click.echo(f"Skipped {error.source}: {error.message}", err=True)
    if not result.config:
        raise click.ClickException("No test configurations found. Please check your API specifications.")
    return result


def _parse_params(values: tuple[str, ...]) -> dict[str, str]:
    params = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint="-p/--param")
        params[key] = value
    return params


@click.group()
@click.option("--env-file", default=None, type=click.Path(exists=True, dir_okay=False), help="Load settings from this .env file.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, env_file: str | None, verbose: bool):
    """API Playground: endpoint docs and mock requests from OpenAPI specs."""
    settings = Settings(env_file)
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


@main.command("convert")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the JSON test configuration to this file.")
@click.pass_obj
def convert_cmd(settings: Settings, paths: tuple[Path, ...], output: Path | None):
    """Convert OpenAPI files or directories into a test configuration."""
    result = _convert_paths(paths, settings)
    text = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    if output is None:
        click.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    click.echo(f"Test configuration for {len(result.config)} resources saved to {output}")


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file path for the Markdown documentation.")
@click.pass_obj
def docs(settings: Settings, paths: tuple[Path, ...], output: Path):
    """Render endpoint documentation as Markdown."""
    result = _convert_paths(paths, settings)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_markdown(result.config), encoding="utf-8")
    click.echo(f"Documentation saved to {output}")


@main.command()
@click.argument("spec", type=click.Path(exists=True, path_type=Path))
@click.argument("resource")
@click.argument("action")
@click.option("-p", "--param", "params", multiple=True, help="Parameter value as key=value (repeatable).")
@click.option("--body", default=None, help="JSON request body (object or array of objects).")
@click.pass_obj
def request(settings: Settings, spec: Path, resource: str, action: str, params: tuple[str, ...], body: str | None):
    """Send a mock request for RESOURCE ACTION and print the response."""
    result = _convert_paths((spec,), settings)
    inputs: dict = dict(_parse_params(params))

    if body is not None:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"invalid JSON: {e}", param_hint="--body")
        if isinstance(payload, list):
            inputs["body"] = payload
        elif isinstance(payload, dict):
            inputs.update(payload)
        else:
            raise click.BadParameter("must be a JSON object or array", param_hint="--body")

    backend = MockBackend.from_config(
        result.config, base_path=settings.api_base_path, max_items=settings.max_response_items
    )
    session = PlaygroundSession(result.config, backend=backend, base_path=settings.api_base_path)
    try:
        response = session.send(resource, action, inputs)
    except KeyError as e:
        raise click.ClickException(e.args[0])
    except RequestBuildError as e:
        raise click.ClickException(str(e))

    click.echo(f"{session.last_request.method} {session.last_request.url}")
    click.echo(json.dumps(response, indent=2, ensure_ascii=False))
    if not response["success"]:
        raise SystemExit(1)


@main.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST).")
@click.option("--port", default=None, type=int, help="Port (defaults to PORT).")
@click.pass_obj
def serve(settings: Settings, host: str | None, port: int | None):
    """Run the HTTP service that serves /api/openapi-tests."""
    import uvicorn

    from api_playground.server import create_app

    uvicorn.run(create_app(settings), host=host or settings.host, port=port or settings.port)
