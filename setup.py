from setuptools import find_packages, setup


extras_require = {}

extras_require["mongo"] = [
    'PyMongo>=4.6.3,<5.0',
]

extras_require["smtp"] = [
    'aiosmtplib>=3.0,<5.0',
]

extras_require["mailjet"] = [
    'mailjet_rest>=1.4.0,<2.0',
    'requests>=2.31.0,<3.0',
]

extras_require["api"] = [
    'fastapi>=0.110',
]

extras_require["all"] = [
    *extras_require["mongo"],
    *extras_require["smtp"],
    *extras_require["mailjet"],
    *extras_require["api"],
]

extras_require["test"] = [
    *extras_require["all"],
    'pytest>=7.4',
    'httpx>=0.25',
]


setup(
    name='campus_recovery',
    version='1.0.0',
    packages=find_packages(include=['campus_recovery', 'campus_recovery.*']),
    license='MIT',
    description='Credential recovery through one-time codes for the campus services backend',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    install_requires=[
        'bcrypt>=4.0',
        'Jinja2>=3.1',
        'pydantic>=2.5',
        'pydantic-settings>=2.0',
        'python-dateutil>=2.8',
        'python-dotenv>=1.0.0,<2.0'
    ],
    extras_require=extras_require,
    python_requires=">=3.10"
)
