#!/usr/bin/env python3

import shlex
import shutil
import subprocess
import sys
from fractions import Fraction

PROGNAME = "vidbbox"

_verbosity = 0
_quiet = False

#============================================

def set_verbosity(level: int, quiet: bool = False) -> None:
	global _verbosity
	global _quiet
	_verbosity = max(0, int(level))
	_quiet = bool(quiet)
	return

#============================================

def is_quiet_mode() -> bool:
	return _quiet

#============================================

def log(message: str, level: int = 1) -> None:
	"""
	Print a diagnostic line to stderr when the verbosity allows it.

	Level 0 lines are report lines and are shown unless quiet mode is on.
	"""
	if _quiet and level > 0:
		return
	if level > _verbosity:
		return
	print(f"{PROGNAME}: {message}", file=sys.stderr, flush=True)
	return

#============================================

def run_process(cmd: list, merge_output: bool = False) -> subprocess.CompletedProcess:
	"""
	Run a subprocess command and capture its output as text.

	Args:
		cmd: Command list to execute.
		merge_output: Send stderr into stdout when True.

	Returns:
		subprocess.CompletedProcess: Completed process, any return code.
	"""
	showcmd = shlex.join([str(part) for part in cmd])
	log(f"CMD: '{showcmd}'", level=1)
	stderr_target = subprocess.STDOUT if merge_output else subprocess.PIPE
	proc = subprocess.run([str(part) for part in cmd], stdout=subprocess.PIPE,
		stderr=stderr_target, text=True, errors="replace")
	return proc

#============================================

def which(cmd_name: str) -> str | None:
	return shutil.which(cmd_name)

#============================================

def round_half_up_fraction(value: Fraction) -> int:
	numerator = value.numerator
	denominator = value.denominator
	whole = numerator // denominator
	remainder = numerator - (whole * denominator)
	if remainder * 2 >= denominator:
		return whole + 1
	return whole

#============================================

def format_hundredths(hundredths: int) -> str:
	sign = "-" if hundredths < 0 else ""
	value = abs(hundredths)
	return f"{sign}{value // 100}.{value % 100:02d}"
