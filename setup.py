from setuptools import setup, find_packages

setup(
    name="grafana-k8s-setup",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={"grafana_k8s_setup.render": ["templates/*.yaml"]},
    python_requires=">=3.9",
    install_requires=[
        "cli-core-yo>=2",
        "pydantic>=2",
        "PyYAML",
        "rich",
        "typer",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "grafana-k8s-setup=grafana_k8s_setup.cli:main",
        ],
    },
)
