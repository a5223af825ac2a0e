"""
Tests for the stored procedure catalog loader.
"""

import pytest
import yaml

from dmi.config.procedure_loader import load_procedure_catalog
from dmi.infrastructure.sql.procedures import ParameterType


@pytest.fixture
def catalog_file(tmp_path):
    """A catalog with one returning and one non-returning procedure."""
    content = {
        "procedures": {
            "usp_delete_user": {
                "returns": "INTEGER",
                "parameters": [
                    {"name": "@id", "type": "INTEGER"},
                    {"name": "@active", "type": "BIT", "nullable": False},
                ],
            },
            "usp_touch": {"parameters": [{"name": "@when", "type": "TIMESTAMP"}]},
        }
    }
    path = tmp_path / "procedures.yml"
    path.write_text(yaml.safe_dump(content), encoding="utf-8")
    return path


@pytest.mark.unit
class TestLoadProcedureCatalog:
    """Test cases for load_procedure_catalog."""

    def test_loads_signatures(self, catalog_file):
        catalog = load_procedure_catalog(catalog_file)

        assert set(catalog) == {"usp_delete_user", "usp_touch"}
        delete_user = catalog["usp_delete_user"]
        assert delete_user.name == "usp_delete_user"
        assert delete_user.return_type is ParameterType.INTEGER
        assert [p.name for p in delete_user.parameters] == ["@id", "@active"]
        assert delete_user.parameters[1].type is ParameterType.BIT
        assert delete_user.parameters[1].nullable is False
        assert catalog["usp_touch"].has_return_value is False

    def test_path_from_settings(self, catalog_file, monkeypatch):
        monkeypatch.setenv("DMI_PROCEDURES_CONFIG", str(catalog_file))
        assert "usp_touch" in load_procedure_catalog()

    def test_no_path_configured(self):
        assert load_procedure_catalog() == {}

    def test_missing_file_returns_empty(self, tmp_path):
        assert load_procedure_catalog(tmp_path / "absent.yml") == {}

    def test_empty_file_returns_empty(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        assert load_procedure_catalog(path) == {}

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "invalid.yml"
        path.write_text("procedures: [", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_procedure_catalog(path)

    def test_non_dict_raises(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- not\n- a\n- catalog", encoding="utf-8")
        with pytest.raises(ValueError, match="expected dict"):
            load_procedure_catalog(path)

    def test_unknown_parameter_type_raises(self, tmp_path):
        path = tmp_path / "bad_type.yml"
        path.write_text(
            yaml.safe_dump(
                {"procedures": {"usp_x": {"parameters": [{"name": "@id", "type": "BLOB"}]}}}
            ),
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="validation failed"):
            load_procedure_catalog(path)
