import numpy as np

SAMPLE_RATE = 500.0
THETA_HZ = 8.0


def sinusoid(n_samples, phase=0.0, freq=THETA_HZ, sample_rate=SAMPLE_RATE):
    t = np.arange(n_samples) / sample_rate
    return np.cos(2 * np.pi * freq * t + phase)


def locked_epochs(n_channels, n_samples, n_trials, seed=0):
    """Every channel carries the same 8 Hz wave within a trial; trials differ in start phase."""
    rng = np.random.default_rng(seed)
    data = np.empty((n_channels, n_samples, n_trials))
    for k, phase in enumerate(rng.uniform(-np.pi, np.pi, n_trials)):
        data[:, :, k] = sinusoid(n_samples, phase)
    return data


def random_phase_epochs(n_samples, n_trials, seed=0):
    """Two channels whose phase difference is uniformly random across trials."""
    rng = np.random.default_rng(seed)
    data = np.empty((2, n_samples, n_trials))
    for k in range(n_trials):
        data[0, :, k] = sinusoid(n_samples, rng.uniform(-np.pi, np.pi))
        data[1, :, k] = sinusoid(n_samples, rng.uniform(-np.pi, np.pi))
    return data


def jittered_epochs(n_samples, n_trials, kappa=2.0, seed=0):
    """Two channels with a von Mises distributed phase difference across trials."""
    rng = np.random.default_rng(seed)
    data = np.empty((2, n_samples, n_trials))
    for k in range(n_trials):
        phase = rng.uniform(-np.pi, np.pi)
        data[0, :, k] = sinusoid(n_samples, phase)
        data[1, :, k] = sinusoid(n_samples, phase + rng.vonmises(0.0, kappa))
    return data


