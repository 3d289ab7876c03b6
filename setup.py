# -*- coding: utf-8 -*-
from setuptools import find_packages, setup

setup(
    name="hwcloud-provider",
    version="0.1",
    description="Resource provider and acceptance test framework for Huawei Cloud.",
    author="Cloud Provider QE Team",
    author_email="hwcloud-provider@example.com",
    install_requires=[
        "docopt==0.6.2",
        "jinja2==3.1.6",
        "junitparser==4.0.2",
        "python-hcl2==4.3.2",
        "pyyaml==6.0.2",
        "requests==2.32.4",
        "urllib3==2.5.0",
    ],
    extras_require={
        "test": [
            "mock==5.1.0",
            "pytest==8.3.5",
        ],
    },
    zip_safe=True,
    include_package_data=True,
    packages=find_packages(exclude=["tests", "tests.*", "unittests", "unittests.*"]),
    py_modules=["init_suite", "run"],
)
