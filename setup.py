from setuptools import setup

setup(
    name='atmfjstc-rar-scope',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=['atmfjstc.lib.rar_scope'],

    install_requires=[
        'atmfjstc-archive-forensics>=0.4.1, <1',
        'atmfjstc-error-utils>=1.1, <2',
        'atmfjstc-file-utils>=2.5, <3',
        'atmfjstc-iso-timestamp>=1.1.0, <2',
    ],

    zip_safe=True,

    description="Lists the entries of RAR archives by scanning their headers, without decompressing anything",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: System :: Archiving",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
