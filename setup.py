from setuptools import setup, find_packages

setup(
    name='callstereo',
    version='1.0.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    python_requires='>=3.11',
    install_requires=[
        'colored==2.2.3',
        'halo==0.0.31',
        'ffmpeg-python==0.2.0',
        'python-dotenv==1.0.1',
    ],
    extras_require={
        'test': [
            'pytest>=8.0',
        ],
    },
    entry_points='''
        [console_scripts]
        callstereo=callstereo.__main__:main
    ''',
    license='MIT',
    keywords='call recording stereo diarized audio ffmpeg',
    description='Rebuild agent/customer stereo call recordings from per-turn clips',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)
