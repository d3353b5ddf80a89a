from setuptools import setup, find_packages

__version__ = '0.1.0'

setup(name='wasp-switchboard',
      version=__version__,
      description=('Location transparent endpoint dispatch: call named '
                   'endpoints the same way whether they run in-process or '
                   'behind another HTTP service, and serve them over HTTP '
                   'with a uniform data/error envelope.'),
      author='Matt Rasband, Nick Humrich',
      author_email='matt.rasband@gmail.com',
      license='Apache-2.0',
      url='',
      download_url='',
      keywords=(
          'microservice',
          'rpc',
          'api',
          'asyncio',
      ),
      packages=find_packages(exclude=('tests', 'tests.*')),
      python_requires='>=3.8',
      classifiers=[
          'Programming Language :: Python :: 3',
          'License :: OSI Approved :: Apache Software License',
          'Intended Audience :: Developers',
          'Development Status :: 2 - Pre-Alpha',
          'Topic :: Software Development',
      ],
      install_requires=[
          'httptools>=0.5',
          'aiohttp>=3.8',
          'multidict>=6.0',
          'uvloop>=0.17',
          'click>=8.0',
      ],
      extras_require={
          'test': [
              'pytest',
              'anyio',
          ],
      },
      entry_points={
          'console_scripts': [
              'switchboard = switchboard.__main__:main',
          ],
      },
      zip_safe=False)
