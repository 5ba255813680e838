from setuptools import setup

setup(
    name='ircmill',
    version='0.3.0',
    packages=[
        'ircmill',
        'ircmill.utils'
    ],
    python_requires='>=3.8',
    install_requires=[],
    extras_require={
        'docs': 'sphinx_rtd_theme',                   # the Sphinx theme we use
        'tests': ['pytest', 'pytest-asyncio'],        # collect and run tests
        'coverage': 'pytest-cov'                      # get test case coverage
    },
    entry_points={
        'console_scripts': [
            'ircmill = ircmill.utils.run:main',
            'ircmill-irccat = ircmill.utils.irccat:main'
        ]
    },

    keywords='irc protocol parser client asyncio python3',
    description='An IRC message codec, command taxonomy and asyncio client connection engine for Python 3.',
    license='BSD',

    zip_safe=True,
    test_suite='tests'
)
