from setuptools import setup, find_packages

"""Install instructions

pip install .

To also install the optional test collector
pip install .[test]

The tests can be run with
python tests/runner.py
"""

setup(
    name="cecvm",
    version=1.0,
    author="David Kleiven",
    author_email="davidkleiven446@gmail.com",
    description="Cluster Variation Method for multicomponent alloys",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    include_package_data=True,
    package_data={"cecvm": ["data/clusters/*.json"]},
    install_requires=["numpy", "scipy", "ase"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.6"
)
