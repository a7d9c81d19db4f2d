"""Render a test configuration as human-readable Markdown documentation."""

from api_playground.converter.models import BodyFields, OperationConfig, ParamConfig, Resource
from api_playground.converter.operation import get_array_body_item_schema, has_array_body

EMPTY_MESSAGE = "No test configurations found. Please check your API specifications."

LOCATION_TITLES = {
    "path": "Path parameters",
    "query": "Query parameters",
    "header": "Headers",
    "cookie": "Cookies",
    "body": "Request body",
}


def group_resources(config: dict[str, Resource]) -> list[tuple[str, list[str]]]:
    """Return ``[(top_level_name, [child_names])]`` in config order.

    A resource with a ``parent_group`` is listed under that parent. Children
    whose parent is missing from the config are shown at the top level.
    """
    children: dict[str, list[str]] = {}
    for name, resource in config.items():
        if resource.parent_group and resource.parent_group in config:
            children.setdefault(resource.parent_group, []).append(name)

    grouped = []
    for name, resource in config.items():
        if resource.parent_group and resource.parent_group in config:
            continue
        grouped.append((name, children.get(name, [])))
    return grouped


def render_markdown(config: dict[str, Resource]) -> str:
    """Render every resource, action and parameter as Markdown."""
    if not config:
        return EMPTY_MESSAGE + "\n"

    lines: list[str] = ["# API Reference", ""]
    for name, child_names in group_resources(config):
        lines.extend(_render_resource(name, config[name], level=2))
        for child in child_names:
            lines.extend(_render_resource(child, config[child], level=3))
    return "\n".join(lines).rstrip() + "\n"


def _render_resource(name: str, resource: Resource, level: int) -> list[str]:
    lines = [f"{'#' * level} {name}", ""]
    if not resource.operations:
        lines.extend(["_No operations._", ""])
    for action, op in resource.operations.items():
        lines.extend(_render_operation(action, op, level + 1))
    return lines


def _render_operation(action: str, op: OperationConfig, level: int) -> list[str]:
    lines = [f"{'#' * level} {op.verb} {op.endpoint}", "", f"Action: `{action}`", ""]
    if op.description:
        lines.extend([op.description, ""])

    for location, params in op.parameters.items():
        title = LOCATION_TITLES.get(location, f"{location.title()} parameters")
        if location == "body" and has_array_body(op):
            lines.extend([f"**{title}** (array of objects, each item:)", ""])
            lines.extend(_render_table(get_array_body_item_schema(op) or {}))
        elif isinstance(params, dict):
            lines.extend([f"**{title}**", ""])
            lines.extend(_render_table(params))

    if not op.parameters:
        lines.extend(["_No parameters._", ""])
    return lines


def _render_table(params: BodyFields) -> list[str]:
    if not params:
        return ["_No fields._", ""]
    lines = [
        "| Name | Type | Required | Options | Description |",
        "|------|------|----------|---------|-------------|",
    ]
    for name, param in params.items():
        lines.append(
            f"| {name} | {_type_label(param)} | {'yes' if param.required else 'no'} "
            f"| {_options_label(param)} | {_cell(param.description)} |"
        )
    lines.append("")
    return lines


def _type_label(param: ParamConfig) -> str:
    if param.multiple_select:
        return f"{param.type} (multi-select)"
    return param.type


def _options_label(param: ParamConfig) -> str:
    if param.options is None:
        return ""
    return ", ".join(f"`{o}`" for o in param.options)


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")
