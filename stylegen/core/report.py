"""Report builder: text and JSON summaries of generated modules."""

import json
import os
from typing import Any

from stylegen.core.types import GenerationReport


def format_text(reports: list[GenerationReport]) -> str:
    """Format generation results as human-readable text."""
    lines = []
    for report in reports:
        kind = 'palette' if report.is_palette else 'style'
        lines.append(f'── {report.base_name} ({kind}, {report.variable_count} values) from {report.module_path}')
        lines.append(
            f'  shared: {report.px_value_count} px, '
            f'{len(report.font_families)} font families, {len(report.icon_masks)} icon masks'
        )
        if report.checksum is not None:
            lines.append(f'  checksum: {report.checksum}')
        for path, artifact in report.artifacts.items():
            state = 'written' if artifact['written'] else 'unchanged'
            lines.append(f'  {os.path.basename(path)}: {state} ({artifact["bytes"]} bytes)')
        lines.append('')

    written = sum(r.written_count for r in reports)
    total = sum(len(r.artifacts) for r in reports)
    lines.append(f'{len(reports)} modules, {written}/{total} files written')
    return '\n'.join(lines)


def format_json(reports: list[GenerationReport]) -> str:
    """Format generation results as JSON."""
    modules = []
    for report in reports:
        obj: dict[str, Any] = {
            'module': report.module_path,
            'base_name': report.base_name,
            'palette': report.is_palette,
            'values': report.variable_count,
            'shared': {
                'px_values': report.px_value_count,
                'font_families': report.font_families,
                'icon_masks': report.icon_masks,
            },
            'artifacts': [{'path': path, **artifact} for path, artifact in report.artifacts.items()],
        }
        if report.checksum is not None:
            obj['checksum'] = report.checksum
        modules.append(obj)

    summary = {
        'modules': len(reports),
        'written': sum(r.written_count for r in reports),
        'files': sum(len(r.artifacts) for r in reports),
    }
    return json.dumps({'modules': modules, 'summary': summary}, indent=2)
