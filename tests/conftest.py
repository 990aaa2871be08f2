from pathlib import Path
from typing import Callable

import pytest

WriteTemplate = Callable[[Path, str, str], Path]

SAMPLE_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <title>{{ title }}</title>
    <!-- page styles -->
    <style>
      body { margin: 0; padding: 0; }
    </style>
  </head>
  <body>
    {% if user %}
      <p>Hello,   {{ user.name }}!</p>
    {% endif %}
    <pre>  keep
    this  </pre>
    <script>
      // greet
      var greeting = "hi  there";
    </script>
  </body>
</html>
"""


@pytest.fixture
def write_template() -> WriteTemplate:
    def _write_template(root: Path, relative_path: str, content: str) -> Path:
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write_template
