#!/usr/bin/env python


import setuptools

setuptools.setup(name='disfunc',
      version='0.1.0',
      description='Annotated, source-interleaved disassembly of Go functions.',
      license='Apache License (2.0)',
      packages=setuptools.find_packages(include=['disfunc', 'disfunc.*']),
      python_requires='>=3.10',
      classifiers = ["Programming Language :: Python",
                     "Programming Language :: Python :: 3",
                     "Operating System :: OS Independent",
                     "License :: OSI Approved :: Apache Software License"],
      install_requires=[
          'rich',
      ],
      extras_require={
          'test': [
              'pytest',
          ],
      },
      entry_points={
          'console_scripts': [
              'disfunc = disfunc.cli:main',
          ],
      },
 )
