from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="jtlreport",
    version="0.3.0",
    author="jtlreport contributors",
    description="Streaming aggregation and HTML reporting for JMeter result logs.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/jtlreport/jtlreport",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"jtlreport.report": ["templates/*.html.j2"]},
    python_requires=">=3.10",
    install_requires=["PyYAML>=6.0", "pandas>=2.0", "Jinja2>=3.1"],
    extras_require={"test": ["pytest"]},
    tests_require=["pytest"],
    entry_points={"console_scripts": ["jtlreport=jtlreport.cli:main"]},
)
