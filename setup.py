import os
from setuptools import find_namespace_packages, setup

with open("README.md") as readme_file:
    readme = readme_file.read()

this = os.path.dirname(os.path.realpath(__file__))


def read(name):
    with open(os.path.join(this, name)) as f:
        return f.read()

VERSION = "1.0.0"


setup(
    name="auto-power-profile",
    version=VERSION,
    description="Automatic power profile switching for Linux desktops",
    long_description=readme,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["auto_power_profile", "auto_power_profile.*"]),
    install_requires=read("requirements.txt").splitlines(),
    extras_require={"test": ["pytest"]},
    python_requires=">=3.10",
    include_package_data=True,
    zip_safe=True,
    license="GPLv3",
    keywords="linux power profile battery upower power-profiles-daemon",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Operating System :: POSIX :: Linux",
        "Environment :: Console",
        "Natural Language :: English",
    ],
    entry_points={
        "console_scripts": [
            "auto-power-profile=auto_power_profile.bin.auto_power_profile:main",
        ],
    },
)
