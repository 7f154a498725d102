# sourcemap_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта SourceMapScout.

Сериализация объекта Verdict в файл.
"""
import json
from pathlib import Path

from sourcemap_scout.audit import Verdict


def render_json(verdict: Verdict, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет результат аудита в формате JSON по указанному пути.

    :param verdict: объект Verdict
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 вместо компактной записи
    :return: Path сохранённого файла

    Пример:
    ```python
    from sourcemap_scout.report.json_report import render_json
    report_path = render_json(verdict, 'reports/valid-source-maps.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(verdict.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
