"""Tool module resolution.

Tool modules live at ``tool_modules/aa_<name>/src/tools_<variant>.py`` and
are imported by dotted module path:

    get_tools_module_name("jira")        # tool_modules.aa_jira.src.tools_core
    get_tools_module_name("jira_core")   # tool_modules.aa_jira.src.tools_core
    get_tools_module_name("jira_extra")  # tool_modules.aa_jira.src.tools_extra
"""

from pathlib import Path

PROJECT_DIR = Path(__file__).parent.parent
TOOL_MODULES_DIR = PROJECT_DIR / "tool_modules"
TOOL_MODULES_PACKAGE = "tool_modules"

VARIANTS = ("core", "extra")
DEFAULT_VARIANT = "core"


def split_module_name(module_name: str) -> tuple[str, str]:
    """Split ``jira_extra`` into ``("jira", "extra")``; bare names get ``core``."""
    for variant in VARIANTS:
        suffix = f"_{variant}"
        if module_name.endswith(suffix):
            return module_name[: -len(suffix)], variant
    return module_name, DEFAULT_VARIANT


def get_tools_module_name(module_name: str) -> str:
    base_name, variant = split_module_name(module_name)
    return f"{TOOL_MODULES_PACKAGE}.aa_{base_name}.src.tools_{variant}"


def get_available_modules() -> set[str]:
    """Discover loadable tool modules as ``<name>_<variant>`` names."""
    modules: set[str] = set()
    if not TOOL_MODULES_DIR.exists():
        return modules

    for module_dir in TOOL_MODULES_DIR.glob("aa_*"):
        base_name = module_dir.name[len("aa_") :]
        for variant in VARIANTS:
            if (module_dir / "src" / f"tools_{variant}.py").exists():
                modules.add(f"{base_name}_{variant}")
    return modules
