from setuptools import setup, find_packages


setup(
    name="assetpack",
    version="0.1",
    packages=find_packages(include=["assetpack", "assetpack.*"]),
    description="Pack named, typed assets into a single compressed and AES-GCM sealed container.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[
        "pycryptodomex>=3.23.0",
    ],
)
