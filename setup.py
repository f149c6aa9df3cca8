from setuptools import setup, find_packages

setup(
    name='eegPhaseToolbox',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    description='Phase-locking value estimation with bootstrap confidence intervals for epoched EEG.',
    install_requires=[
        'numpy',
        'scipy',
        'pandas',
        'polars',
        'mne',
        'statsmodels',
        'tqdm',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'eeg-plv=eeg_phase_toolbox.cli:main',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
