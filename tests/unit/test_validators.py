"""Unit tests for prompt validators and filesystem probes"""

import pytest

from astrokit.utils.validators import (
    check_toolchain_version,
    is_directory,
    missing_project_files,
    parse_major_version,
    path_exists,
    validate_http_url,
    validate_not_empty,
    validate_postgres_url,
    validate_project_name
)


class TestProjectName:
    """Test npm-style project name rules"""

    @pytest.mark.parametrize("name", [
        "blog-demo",
        "my_site",
        "site2",
        "@acme/storefront",
        "a" * 214,
    ])
    def test_valid_names(self, name):
        assert validate_project_name(name) is True

    def test_empty(self):
        assert validate_project_name("") == "Project name cannot be empty"
        assert validate_project_name("   ") == "Project name cannot be empty"

    def test_too_long(self):
        assert validate_project_name("a" * 215) == "Project name is too long (max 214 characters)"

    @pytest.mark.parametrize("name", [".hidden", "_private"])
    def test_leading_dot_or_underscore(self, name):
        assert validate_project_name(name) == "Project name cannot start with . or _"

    @pytest.mark.parametrize("name", ["My-Project", "has space", "semi;colon", "@scope/"])
    def test_invalid_characters(self, name):
        verdict = validate_project_name(name)

        assert verdict is not True
        assert "lowercase" in verdict

    @pytest.mark.parametrize("name", [123, None, ["blog-demo"]])
    def test_non_text_is_rejected_not_raised(self, name):
        assert validate_project_name(name) == "Project name must be text"

    def test_length_checked_before_pattern(self):
        """Test each rejection names its own reason"""
        assert "too long" in validate_project_name("A" * 300)


class TestToolchainVersion:
    """Test version floor parsing"""

    @pytest.mark.parametrize("version,expected", [
        ("v20.11.1", 20),
        ("18.0.0", 18),
        ("  v22.1.0\n", 22),
        ("nightly", None),
        ("", None),
    ])
    def test_parse_major_version(self, version, expected):
        assert parse_major_version(version) == expected

    def test_parse_non_string(self):
        assert parse_major_version(None) is None

    def test_floor(self):
        assert check_toolchain_version("v18.19.0", 18) is True
        assert check_toolchain_version("v20.0.0", 18) is True
        assert check_toolchain_version("v16.20.2", 18) is False
        assert check_toolchain_version("garbage", 18) is False


class TestAnswerValidators:

    def test_not_empty(self):
        assert validate_not_empty("medusa-backend") is True
        assert validate_not_empty("  ") == "Value cannot be empty"

    def test_http_url(self):
        assert validate_http_url("http://localhost:9000") is True
        assert validate_http_url("https://shop.example.com") is True
        assert "http://" in validate_http_url("localhost:9000")

    def test_postgres_url(self):
        assert validate_postgres_url("postgres://localhost/medusa-store") is True
        assert "postgres://" in validate_postgres_url("mysql://localhost/db")

    @pytest.mark.parametrize("validator", [validate_not_empty, validate_http_url, validate_postgres_url])
    def test_non_text_values(self, validator):
        assert validator(9000) is not True
        assert validator(None) is not True


class TestFilesystemProbes:
    """Test probes never raise"""

    def test_path_exists(self, tmp_path):
        target = tmp_path / "file.txt"
        assert path_exists(target) is False

        target.write_text("x")
        assert path_exists(target) is True
        assert path_exists(str(target)) is True

    def test_is_directory(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("x")

        assert is_directory(tmp_path) is True
        assert is_directory(target) is False
        assert is_directory(tmp_path / "missing") is False

    def test_invalid_path_is_absent(self):
        """Test embedded NUL bytes are treated as absent"""
        assert path_exists("bad\0path") is False
        assert is_directory("bad\0path") is False

    def test_missing_project_files(self, tmp_path):
        assert missing_project_files(tmp_path) == ["package.json"]

        (tmp_path / "package.json").write_text("{}")
        assert missing_project_files(tmp_path) == []
        assert missing_project_files(tmp_path, ("package.json", "astro.config.mjs")) == ["astro.config.mjs"]
