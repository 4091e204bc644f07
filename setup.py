from setuptools import setup, find_namespace_packages

setup(
    name="lxctb",
    version="0.1.0",
    packages=find_namespace_packages(where="src"),
    package_dir={"": "src"},
    package_data={"lxctb": ["profiles/*.yaml"]},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "click>=8.0",
        "psutil>=5.9",
        "python-dotenv>=1.0",
        "jinja2>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
        "dev": ["black>=23.0", "pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "lxctb=lxctb.CLI.main:main",
            "build-lxc-ubuntu=lxctb.CLI.main:ubuntu_main",
            "build-lxc-fedora=lxctb.CLI.main:fedora_main",
        ],
    },
)
