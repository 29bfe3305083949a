#!/usr/bin/env python3

"""
Report whether a video's frames carry baked-in letterbox or pillarbox bars.

Frames are sampled from each video (or HandBrakeCLI's autocrop scan is used),
the union of the non-black content is computed, and its aspect ratio is
compared with the frame's. One line per video is printed to stderr.
"""

# Standard Library
import argparse
import shlex
import subprocess
import sys

# PIP3 modules
import yaml

# local repo modules
from vidbboxlib.core import analyzer
from vidbboxlib.core import config
from vidbboxlib.core import utils
from vidbboxlib.core.aggregator import BoundingBoxAggregator
from vidbboxlib.core.comparator import AspectComparator
from vidbboxlib.core.errors import ConfigurationError
from vidbboxlib.media import backends

#============================================

def parse_args(argv: list = None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(prog=utils.PROGNAME,
		description="Detect letterboxing baked into video frames")
	parser.add_argument('files', nargs='*',
		help='video files to examine')
	parser.add_argument('-v', '--verbose', dest='verbose', action='count',
		help='more output; repeat for per-frame detail')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='only print the per-video result lines')
	parser.add_argument('-c', '--config', dest='config_file', default=None,
		help='settings yaml file')
	parser.add_argument('-b', '--backend', dest='backend', default=None,
		choices=config.BACKEND_CHOICES,
		help='detection backend (default: auto)')
	parser.add_argument('-j', '--jobs', dest='jobs', type=int, default=1,
		help='number of videos to analyze in parallel')
	parser.add_argument('-r', '--report', dest='report_file', default=None,
		help='write a yaml report of all results')
	parser.add_argument('-e', '--edit', dest='edit', action='store_true',
		help='open each video with io.edit_command after reporting')
	parser.add_argument('-k', '--keep-temp', dest='keep_temp', action='store_true',
		help='keep extracted frames')
	parser.add_argument('--write-default-config', dest='write_default_config',
		default=None, metavar='PATH',
		help='write the default settings yaml to PATH and exit')
	parser.set_defaults(verbose=0)
	parser.set_defaults(quiet=False)
	parser.set_defaults(edit=False)
	parser.set_defaults(keep_temp=False)
	args = parser.parse_args(argv)
	return args

#============================================

def apply_overrides(settings: dict, args: argparse.Namespace) -> dict:
	if args.backend is not None:
		settings["backend"] = args.backend
	if args.keep_temp:
		settings["io"]["keep_temp"] = True
	if args.edit and settings["io"]["edit_command"] is None:
		raise ConfigurationError("--edit needs settings.io.edit_command in the config")
	if args.jobs < 1:
		raise ConfigurationError("--jobs must be >= 1")
	return settings

#============================================

def open_in_editor(edit_command: str, input_file: str) -> None:
	cmd = shlex.split(edit_command) + [input_file]
	utils.log(f"CMD: '{shlex.join(cmd)}'", level=1)
	subprocess.run(cmd)
	return

#============================================

def write_report(report_file: str, results: list) -> None:
	entries = [analyzer.result_to_dict(result) for result in results]
	with open(report_file, "w", encoding="utf-8") as handle:
		yaml.safe_dump({"videos": entries}, handle, sort_keys=False)
	return

#============================================

def run(args: argparse.Namespace) -> int:
	if args.write_default_config is not None:
		config.write_config_file(args.write_default_config, config.default_config())
		return 0
	if len(args.files) == 0:
		raise ConfigurationError("no input files given")
	settings = config.load_settings(args.config_file)
	settings = apply_overrides(settings, args)
	backend = backends.select_backend(settings)
	aggregator = BoundingBoxAggregator(
		min_content_width=settings["trim"]["min_content_width"],
		trailing_discount=settings["sampler"]["trailing_discount"])
	comparator = AspectComparator(
		tolerance_hundredths=settings["compare"]["tolerance_hundredths"])
	video_analyzer = analyzer.VideoAnalyzer(backend, aggregator, comparator)
	if args.jobs > 1:
		pending = video_analyzer.analyze_many(args.files, jobs=args.jobs)
	else:
		# sequential runs report each video as soon as it is done
		pending = (video_analyzer.analyze(input_file) for input_file in args.files)
	results = []
	for result in pending:
		analyzer.report_result(result)
		results.append(result)
		if args.edit:
			open_in_editor(settings["io"]["edit_command"], result.input_file)
	if args.report_file is not None:
		write_report(args.report_file, results)
	if any(result.failed for result in results):
		return 1
	return 0

#============================================

def main(argv: list = None) -> int:
	args = parse_args(argv)
	utils.set_verbosity(args.verbose, quiet=args.quiet)
	try:
		return run(args)
	except ConfigurationError as error:
		print(f"{utils.PROGNAME}: {error}", file=sys.stderr)
		return 1


if __name__ == '__main__':
	sys.exit(main())
