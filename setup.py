# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="tfsynth",
    version="0.1.0",
    description="Synthesize-and-assert harness for Terraform CDK style construct trees",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["tfsynth", "tfsynth.*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'tfsynth=tfsynth.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
