"""Setup file for ldapconf application"""

from setuptools import find_packages, setup


setup(
    name="ldapconf",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=["addict", "ldap3", "pyyaml"],
    extras_require={
        "dev": [
            "pre-commit",
            "pylint",
            "pytest",
            "pytest-cov",
            "pytest-mock",
            "pytest-pylint",
            "black",
        ],
    },
    python_requires=">=3.9",
    package_dir={"ldapconf": "ldapconf"},
    entry_points={
        "console_scripts": [
            "ldapconf = ldapconf.cli:main",
        ],
    },
)
