# setup.py
from setuptools import setup, find_packages

setup(
    name="decay_airdrop",
    version="0.1.0",
    packages=find_packages(include=["decay_airdrop", "decay_airdrop.*"]),
    python_requires=">=3.9",
    install_requires=[
        "cryptography",       # ECDSA claimant keys
        "pycryptodome",       # keccak
        "msgpack",            # canonical signing bytes
        "prometheus_client",  # metrics
        "psutil",             # monitoring
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "airdrop-simulate=decay_airdrop.simulation:main",
        ],
    },
)
