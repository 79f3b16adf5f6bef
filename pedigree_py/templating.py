from jinja2 import Environment, FileSystemLoader, select_autoescape
from pathlib import Path
from typing import Any, Dict

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def get_env(templates_dir: str | Path = TEMPLATES_DIR) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_template(template_name: str, ctx: Dict[str, Any], templates_dir: str | Path = TEMPLATES_DIR) -> str:
    env = get_env(templates_dir)
    tmpl = env.get_template(template_name)
    return tmpl.render(**ctx)
