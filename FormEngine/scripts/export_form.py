#!/usr/bin/env python3
"""Form export tool - build the default purchase order and write both XML documents

Usage:
    python -m FormEngine.scripts.export_form [Suggestions JSON file] [Output directory]

Example:
    python -m FormEngine.scripts.export_form suggestions.json exports/
    python -m FormEngine.scripts.export_form"""

import sys
from pathlib import Path
from loguru import logger

from FormEngine import create_agent
from FormEngine.utils.config import print_config


def export_form(suggestions_path: str = None, output_dir: str = "."):
    """Export the default purchase order, optionally pre-filled from a suggestions file

    Parameters:
        suggestions_path: provider reply saved as a file (optional)
        output_dir: directory that receives purchase_order.xml and purchase_order_template.xml"""
    agent = create_agent()
    print_config(agent.config)

    if suggestions_path:
        path = Path(suggestions_path)
        if not path.exists():
            logger.error(f"File does not exist: {path}")
            return False
        logger.info(f"Read suggestions: {path}")
        applied = agent.apply_suggestion_payload(path.read_text(encoding="utf-8"))
        logger.info(f"{len(applied)} value(s) filled from suggestions")

    result = agent.export()
    if result is None:
        logger.error(f"✗ Export failed: {agent.state.error_message}")
        return False

    target = Path(output_dir)
    target.mkdir(parents=True, exist_ok=True)
    literal_path = target / "purchase_order.xml"
    template_path = target / "purchase_order_template.xml"
    literal_path.write_text(result.literal_xml, encoding="utf-8")
    template_path.write_text(result.template_xml, encoding="utf-8")

    for warning in result.warnings:
        logger.warning(warning)
    logger.success(f"✓ XML written: {literal_path}, {template_path}")
    return True


def main():
    """main function"""
    if len(sys.argv) > 1 and sys.argv[1] in ("-h", "--help"):
        print(__doc__)
        sys.exit(0)

    suggestions_path = sys.argv[1] if len(sys.argv) > 1 else None
    output_dir = sys.argv[2] if len(sys.argv) > 2 else "."

    success = export_form(suggestions_path, output_dir)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
