"""Tests for specification loader."""

from pathlib import Path

import pytest

from bdd_reconciler.specification_loader import load_specification


class TestLoadSpecification:
    """Tests for load_specification function."""

    __test__ = True  # Explicitly mark as test class despite "Test" prefix

    async def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        """Loads and parses a specification dump."""
        path = tmp_path / "spec.yaml"
        path.write_text(
            """
features:
  - name: "User Login"
    file_path: "features/login.feature"
    tags: ["auth"]
    background:
      steps:
        - keyword: "Given"
          text: "the app is running"
    scenarios:
      - name: "Can login"
        line: 6
        steps:
          - keyword: "Given"
            text: "the user is on the login page"
            line: 7
      - name: "Login with role"
        type: "outline"
        steps:
          - keyword: "When"
            text: "the user logs in as <role>"
        examples:
          - header: ["role"]
            rows: [["admin"], ["guest"]]
"""
        )

        specification = await load_specification(path)

        feature = specification.features[0]
        assert feature.name == "User Login"
        assert feature.tags == ["auth"]
        assert feature.background is not None
        assert feature.background.steps[0].text == "the app is running"
        assert feature.scenarios[0].steps[0].line == 7
        outline = feature.scenarios[1]
        assert outline.is_outline
        assert outline.example_rows() == [{"role": "admin"}, {"role": "guest"}]

    async def test_loads_json(self, tmp_path: Path) -> None:
        """JSON dumps are valid YAML too."""
        path = tmp_path / "spec.json"
        path.write_text('{"features": [{"name": "Cart", "scenarios": []}]}')

        specification = await load_specification(path)

        assert specification.features[0].name == "Cart"

    async def test_raises_for_missing_file(self, tmp_path: Path) -> None:
        """Raises FileNotFoundError for a missing specification."""
        with pytest.raises(FileNotFoundError, match="Specification file not found"):
            await load_specification(tmp_path / "missing.yaml")

    async def test_raises_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ValueError for malformed YAML."""
        path = tmp_path / "spec.yaml"
        path.write_text("invalid: yaml: content: [")

        with pytest.raises(ValueError, match="Invalid YAML"):
            await load_specification(path)

    async def test_raises_for_empty_file(self, tmp_path: Path) -> None:
        """Raises ValueError for an empty file."""
        path = tmp_path / "spec.yaml"
        path.write_text("")

        with pytest.raises(ValueError, match="Empty specification file"):
            await load_specification(path)

    async def test_raises_for_invalid_schema(self, tmp_path: Path) -> None:
        """Raises ValueError when the document does not match the schema."""
        path = tmp_path / "spec.yaml"
        path.write_text(
            """
features:
  - description: "a feature without a name"
"""
        )

        with pytest.raises(ValueError, match="Invalid specification schema"):
            await load_specification(path)
