from setuptools import setup, find_packages


setup(
    name='pingkeeper',
    version='0.1',
    packages=find_packages(include=['pingkeeper', 'pingkeeper.*']),

    description='Django application that receives, verifies and records pingbacks',
    python_requires='>=3.8',
    install_requires = [
        'django>=3.2',
    ],
    extras_require = {
        'test': [
            'pytest',
            'pytest-django',
        ],
    },
)
