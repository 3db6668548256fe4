#!/usr/bin/env python

from setuptools import find_packages, setup

setup(
    name='tgspain',
    version='1.0.0',
    description='A web application to run Technovation Girls Spain events',
    author='Technovation Girls Spain',
    url='https://github.com/technovation-spain/tgspain.git',
    packages=find_packages(exclude=['*.tests', '*.tests.*']),
    include_package_data=True,
    package_data={
        'tgspain': [
            'templates/*.html',
            'templates/*/*.html',
            'platform_settings/*.yaml',
        ],
    },
    python_requires='>=3.10',
    install_requires=[
        'Django>=4.2,<6.0',
        'django-bootstrap4>=23.1',
        'django-qr-code>=4.0',
        'boto3>=1.28',
        'PyYAML>=6.0',
        'sentry-sdk>=1.30',
    ],
    extras_require={
        'mysql': ['mysqlclient>=2.1'],
        'test': ['pytest>=7.0', 'pytest-django>=4.5'],
    },
    license='MIT License'
)
