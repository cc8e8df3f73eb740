"""
Packaging for the z21 command line client. Install with `pip install -e .[test]` and run the tests with `pytest`.
"""

from setuptools import setup


setup(
    name='z21cli',
    version='0.1.0',
    description='Command line client for the Roco Z21 model railway control station.',
    url='',
    author='',
    author_email='',
    license='LGPL',
    package_dir={'': 'src'},
    packages=['z21cli', 'z21cli.commands', 'z21cli.conduit', 'z21cli.config',
              'z21cli.protocol', 'z21cli.support'],
    package_data={'z21cli.config': ['*.cfg']},
    install_requires=['configobj>=5.0.9'],
    extras_require={
        'test': ['PyHamcrest', 'timeout-decorator', 'pytest']
    },
    entry_points={
        'console_scripts': ['z21 = z21cli.cli:main']
    },
    python_requires='>=3.6',
    zip_safe=False,
)
