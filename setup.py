#!/usr/bin/env python

import os.path as osp
import re

import setuptools

here = osp.dirname(osp.abspath(__file__))


def get_version():
    with open(osp.join(here, "promptseg", "version.py")) as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.M)
    if not match:
        raise RuntimeError("Unable to find __version__ in promptseg/version.py")
    return match.group(1)


setuptools.setup(
    name="promptseg",
    version=get_version(),
    description="Point-prompted mask decoding and overlay rendering for SAM-style ONNX mask decoders.",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    package_data={"promptseg": ["configs/*.yaml"]},
    include_package_data=True,
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=['numpy>=1.18.2',
                      'opencv-python-headless>=4.1.2.30',
                      'onnxruntime>=1.14',
                      'PyYAML>=5.3',
                      'termcolor>=1.1.0',
                      'colorama>=0.4; platform_system=="Windows"',
                      ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    python_requires='>=3.10',

    entry_points={
        'console_scripts': [
            'promptseg = promptseg.main:main',
        ],
    },


)
