"""
python -m build
twine upload dist/*
"""

from setuptools import setup, find_packages


def jsonapi_view_setup():
    with open("requirements.txt", "rt") as fp:
        install_requires = fp.read().strip().split("\n")

    version = "1.0.0"

    setup(
        name="jsonapi-view",
        packages=find_packages(exclude=["tests", "tests.*"]),
        version=version,
        license="MIT",
        description="jsonapi_view : JSON:API documents for SqlAlchemy records",
        long_description=open("README.rst").read(),
        keywords=["SqlAlchemy", "Flask", "JsonAPI", "Serialization"],
        python_requires=">=3.9, <4",
        install_requires=install_requires,
        classifiers=[
            "Development Status :: 4 - Beta",
            "License :: OSI Approved :: MIT License",
            "Intended Audience :: Developers",
            "Framework :: Flask",
            "Topic :: Software Development :: Libraries",
            "Environment :: Web Environment",
            "Programming Language :: Python :: 3.12",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.9",
        ],
        extras_require={"test": ["pytest>=7"]},
    )


jsonapi_view_setup()  # pragma: no cover
