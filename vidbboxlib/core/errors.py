#!/usr/bin/env python3

#============================================

class ConfigurationError(RuntimeError):
	"""No usable detection backend, or an invalid setting. Fatal for the run."""
	pass

#============================================

class BackendFailure(RuntimeError):
	"""An external sampler or scanner failed for one video."""
	pass
