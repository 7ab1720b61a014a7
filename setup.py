import setuptools

VERSION = '0.0.0'

setup_params = dict(
    name='cproxy',
    version=VERSION,
    author='Kenneth VanderLinde',
    author_email='kwvanderlinde@gmail.com',
    keywords='http cache proxy socket',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    package_dir={'cproxy': 'cproxy'},
    include_package_data=True,
    description='A minimal caching HTTP/1.0 retrieval agent',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    install_requires=[],
    extras_require={
        'dev': [
            'mockito~=1.5',
            'pytest~=8.0',
            'pytest-cov~=5.0',
            'ddt~=1.7',
        ]
    },
    entry_points={
        'console_scripts': [
            'cproxy = cproxy.cli:main',
        ],
    },
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Natural Language :: English',
        'Operating System :: OS Independent',

        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
    ],
)


if __name__ == '__main__':
    setuptools.setup(**setup_params)
