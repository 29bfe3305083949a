#!/usr/bin/env python3

"""
Config file handling for vidbbox.

A config is a YAML mapping with a version header and a `settings` block.
Anything missing falls back to the code defaults below.
"""

# Standard Library
import copy
import os

# PIP3 modules
import yaml

# local repo modules
from vidbboxlib.core.errors import ConfigurationError

CONFIG_HEADER_KEY = "vidbbox"
CONFIG_HEADER_VALUE = 1

BACKEND_CHOICES = ("auto", "handbrake", "ffmpeg")

#============================================

def default_config() -> dict:
	"""
	Build the default config dictionary.

	Returns:
		dict: Default config.
	"""
	return {
		CONFIG_HEADER_KEY: CONFIG_HEADER_VALUE,
		"settings": {
			"backend": "auto",
			"sampler": {
				"start_seconds": 10.0,
				"interval_seconds": 10.0,
				"max_samples": None,
				"trailing_discount": 2,
			},
			"trim": {
				"fuzz_percent": 10.0,
				"pre_trim_x": 0,
				"pre_trim_y": 0,
				"min_content_width": 10,
			},
			"handbrake": {
				"previews": 30,
			},
			"compare": {
				"tolerance_hundredths": 1,
			},
			"io": {
				"cache_dir": None,
				"keep_temp": False,
				"progress": False,
				"edit_command": None,
			},
		},
	}

#============================================

def build_config_text(config: dict) -> str:
	return yaml.safe_dump(config, sort_keys=False, default_flow_style=False)

#============================================

def write_config_file(config_path: str, config: dict) -> None:
	"""
	Write a config file to disk.

	Args:
		config_path: Output file path.
		config: Config dictionary.
	"""
	text = build_config_text(config)
	os.makedirs(os.path.dirname(config_path) or ".", exist_ok=True)
	with open(config_path, "w", encoding="utf-8") as handle:
		handle.write(text)
	return

#============================================

def load_config(config_path: str) -> dict:
	"""
	Load a config file from disk.

	Args:
		config_path: Config file path.

	Returns:
		dict: Parsed config mapping.
	"""
	if not os.path.isfile(config_path):
		raise ConfigurationError(f"config file not found: {config_path}")
	with open(config_path, "r", encoding="utf-8") as handle:
		data = yaml.safe_load(handle)
	if not isinstance(data, dict):
		raise ConfigurationError("config file must be a mapping")
	if data.get(CONFIG_HEADER_KEY) != CONFIG_HEADER_VALUE:
		raise ConfigurationError(
			f"config file must set {CONFIG_HEADER_KEY}: {CONFIG_HEADER_VALUE}")
	return data

#============================================

def coerce_float(value, config_path: str, key_path: str) -> float:
	if isinstance(value, bool):
		raise ConfigurationError(f"config {config_path}: {key_path} must be a number")
	if isinstance(value, (int, float)):
		return float(value)
	if isinstance(value, str):
		try:
			return float(value)
		except ValueError:
			pass
	raise ConfigurationError(f"config {config_path}: {key_path} must be a number")

#============================================

def coerce_int(value, config_path: str, key_path: str) -> int:
	if isinstance(value, bool):
		raise ConfigurationError(f"config {config_path}: {key_path} must be an integer")
	if isinstance(value, int):
		return value
	if isinstance(value, float) and value.is_integer():
		return int(value)
	if isinstance(value, str):
		try:
			return int(float(value))
		except ValueError:
			pass
	raise ConfigurationError(f"config {config_path}: {key_path} must be an integer")

#============================================

def coerce_bool(value, config_path: str, key_path: str) -> bool:
	if isinstance(value, bool):
		return value
	if isinstance(value, str):
		text = value.strip().lower()
		if text in ("true", "yes", "on", "1"):
			return True
		if text in ("false", "no", "off", "0"):
			return False
	raise ConfigurationError(f"config {config_path}: {key_path} must be true or false")

#============================================

def coerce_optional_str(value, config_path: str, key_path: str) -> str | None:
	if value is None:
		return None
	if isinstance(value, str) and value.strip() != "":
		return value
	raise ConfigurationError(f"config {config_path}: {key_path} must be a string or null")

#============================================

def _section(overrides: dict, name: str, config_path: str) -> dict:
	section = overrides.get(name, {})
	if section is None:
		return {}
	if not isinstance(section, dict):
		raise ConfigurationError(f"config {config_path}: settings.{name} must be a mapping")
	return section

#============================================

def build_settings(config: dict | None, config_path: str | None = None) -> dict:
	"""
	Normalize settings with defaults and validate ranges.

	Args:
		config: Raw config mapping, or None for code defaults.
		config_path: Config file path, used in error messages.

	Returns:
		dict: Normalized settings, same shape as default_config()['settings'].
	"""
	label = config_path or "defaults"
	defaults = default_config()["settings"]
	overrides = {}
	if isinstance(config, dict):
		overrides = config.get("settings", {}) or {}
	if not isinstance(overrides, dict):
		raise ConfigurationError(f"config {label}: settings must be a mapping")
	sampler = _section(overrides, "sampler", label)
	trim = _section(overrides, "trim", label)
	handbrake = _section(overrides, "handbrake", label)
	compare = _section(overrides, "compare", label)
	io = _section(overrides, "io", label)

	settings = copy.deepcopy(defaults)
	backend = overrides.get("backend", defaults["backend"])
	if backend not in BACKEND_CHOICES:
		raise ConfigurationError(
			f"config {label}: settings.backend must be one of {', '.join(BACKEND_CHOICES)}")
	settings["backend"] = backend

	settings["sampler"]["start_seconds"] = coerce_float(
		sampler.get("start_seconds", defaults["sampler"]["start_seconds"]),
		label, "settings.sampler.start_seconds")
	settings["sampler"]["interval_seconds"] = coerce_float(
		sampler.get("interval_seconds", defaults["sampler"]["interval_seconds"]),
		label, "settings.sampler.interval_seconds")
	max_samples = sampler.get("max_samples", defaults["sampler"]["max_samples"])
	if max_samples is not None:
		max_samples = coerce_int(max_samples, label, "settings.sampler.max_samples")
	settings["sampler"]["max_samples"] = max_samples
	settings["sampler"]["trailing_discount"] = coerce_int(
		sampler.get("trailing_discount", defaults["sampler"]["trailing_discount"]),
		label, "settings.sampler.trailing_discount")

	settings["trim"]["fuzz_percent"] = coerce_float(
		trim.get("fuzz_percent", defaults["trim"]["fuzz_percent"]),
		label, "settings.trim.fuzz_percent")
	settings["trim"]["pre_trim_x"] = coerce_int(
		trim.get("pre_trim_x", defaults["trim"]["pre_trim_x"]),
		label, "settings.trim.pre_trim_x")
	settings["trim"]["pre_trim_y"] = coerce_int(
		trim.get("pre_trim_y", defaults["trim"]["pre_trim_y"]),
		label, "settings.trim.pre_trim_y")
	settings["trim"]["min_content_width"] = coerce_int(
		trim.get("min_content_width", defaults["trim"]["min_content_width"]),
		label, "settings.trim.min_content_width")

	settings["handbrake"]["previews"] = coerce_int(
		handbrake.get("previews", defaults["handbrake"]["previews"]),
		label, "settings.handbrake.previews")
	settings["compare"]["tolerance_hundredths"] = coerce_int(
		compare.get("tolerance_hundredths", defaults["compare"]["tolerance_hundredths"]),
		label, "settings.compare.tolerance_hundredths")

	settings["io"]["cache_dir"] = coerce_optional_str(
		io.get("cache_dir", defaults["io"]["cache_dir"]), label, "settings.io.cache_dir")
	settings["io"]["keep_temp"] = coerce_bool(
		io.get("keep_temp", defaults["io"]["keep_temp"]), label, "settings.io.keep_temp")
	settings["io"]["progress"] = coerce_bool(
		io.get("progress", defaults["io"]["progress"]), label, "settings.io.progress")
	settings["io"]["edit_command"] = coerce_optional_str(
		io.get("edit_command", defaults["io"]["edit_command"]),
		label, "settings.io.edit_command")

	if settings["sampler"]["start_seconds"] < 0:
		raise ConfigurationError("sampler.start_seconds must be >= 0")
	if settings["sampler"]["interval_seconds"] <= 0:
		raise ConfigurationError("sampler.interval_seconds must be > 0")
	if max_samples is not None and max_samples < 1:
		raise ConfigurationError("sampler.max_samples must be >= 1 or null")
	if settings["sampler"]["trailing_discount"] < 0:
		raise ConfigurationError("sampler.trailing_discount must be >= 0")
	if settings["trim"]["fuzz_percent"] < 0 or settings["trim"]["fuzz_percent"] > 100:
		raise ConfigurationError("trim.fuzz_percent must be 0..100")
	if settings["trim"]["pre_trim_x"] < 0 or settings["trim"]["pre_trim_y"] < 0:
		raise ConfigurationError("trim.pre_trim_x and trim.pre_trim_y must be >= 0")
	if settings["trim"]["min_content_width"] < 1:
		raise ConfigurationError("trim.min_content_width must be >= 1")
	if settings["handbrake"]["previews"] < 1:
		raise ConfigurationError("handbrake.previews must be >= 1")
	if settings["compare"]["tolerance_hundredths"] < 0:
		raise ConfigurationError("compare.tolerance_hundredths must be >= 0")
	return settings

#============================================

def load_settings(config_path: str | None) -> dict:
	if config_path is None:
		return build_settings(None)
	return build_settings(load_config(config_path), config_path)
