from setuptools import setup, find_packages


setup(name='slabfield',
      version='0.1.0',
      description='Temperature, composition and grain fields of curved subduction features',
      license='MIT',
      packages=find_packages(include=['slabfield', 'slabfield.*']),
      python_requires='>=3.9',
      install_requires=[
          'scipy',
          'numpy',
           ],
      extras_require={
          'test': ['pytest'],
      },
      long_description='None',
      long_description_content_type='text/markdown',
      keywords='geodynamics subduction',
      classifiers=[
          # How mature is this project? Common values are
          #   3 - Alpha
          #   4 - Beta
          #   5 - Production/Stable
          'Development Status :: 3 - Alpha',

          'Intended Audience :: Science/Research',
          'Intended Audience :: Developers',
          'Topic :: Scientific/Engineering',
          'Topic :: Scientific/Engineering :: Physics',

          'License :: OSI Approved :: MIT License',

          'Programming Language :: Python :: 3.9',
      ],
      zip_safe=False)
