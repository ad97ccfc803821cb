"""Fixtures for integration tests."""

from pathlib import Path

import pytest

SPECIFICATION = """
features:
  - name: "User Login"
    file_path: "features/login.feature"
    tags: ["auth"]
    scenarios:
      - name: "Can login"
        tags: ["smoke"]
        steps:
          - keyword: "Given"
            text: "the user is on the login page"
            line: 5
      - name: "Login with role"
        type: "outline"
        steps:
          - keyword: "When"
            text: "the user logs in as <role>"
            line: 9
        examples:
          - header: ["role"]
            rows: [["admin"], ["guest"], ["auditor"]]
  - name: "Shopping Cart"
    file_path: "features/cart.feature"
    background:
      steps:
        - keyword: "Given"
          text: "the user is logged in"
          line: 4
    scenarios:
      - name: "Add item"
        steps:
          - keyword: "When"
            text: "the user adds an item"
            line: 7
          - keyword: "Then"
            text: "the cart holds one item"
            line: 8
  - name: "Password Reset"
    scenarios:
      - name: "Request reset link"
"""


@pytest.fixture
def specification_path(tmp_path: Path) -> Path:
    """Write the specification dump shared by the pipeline tests."""
    path = tmp_path / "specification.yaml"
    path.write_text(SPECIFICATION, encoding="utf-8")
    return path
