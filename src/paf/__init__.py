"""Peak alpha frequency (PAF) estimation for two-channel headband EEG recordings."""

__version__ = "0.1.0"
