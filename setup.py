#!/usr/bin/env python3
from __future__ import annotations

import re
import os
import setuptools
import pathlib
import sys
import toml

__minver__ = '3.8'
__github__ = 'https://github.com/il2cppmeta/il2cppmeta/'
__gitraw__ = 'https://raw.githubusercontent.com/il2cppmeta/il2cppmeta/'
__author__ = 'il2cppmeta contributors'
__slogan__ = 'A decoder for the global metadata of ahead-of-time compiled managed programs.'
__topics__ = [
    'Development Status :: 3 - Alpha',
    'Operating System :: OS Independent',
    'Programming Language :: Python :: 3 :: Only',
    'Topic :: Security',
    'Topic :: Software Development :: Disassemblers',
]


class DeployCommand(setuptools.Command):
    description = 'Tag and push new release.'
    user_options = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    @staticmethod
    def main():
        import subprocess
        import shlex
        import il2cppmeta

        from pathlib import Path

        def run(cmd):
            print(F'run: {cmd}')
            with open(os.devnull, 'wb') as DEVNULL:
                return subprocess.check_call(
                    shlex.split(cmd),
                    stdout=DEVNULL,
                    stderr=DEVNULL,
                    cwd=os.getcwd(),
                )

        root = Path(il2cppmeta.__file__).parent.parent
        os.chdir(root)

        try:
            run(F'git tag {il2cppmeta.__version__}')
            run(R'git push')
            run(R'git push --tags')
        except subprocess.CalledProcessError as E:
            print(F'error: {E!s}')
            return 1
        else:
            return 0

    def run(self):
        sys.exit(self.main())


def get_config():
    here = pathlib.Path(__file__).parent.absolute()
    sys.path.insert(0, str(here))

    import il2cppmeta

    def get_setup_readme(filename: str | pathlib.Path | None = None):
        if filename is None:
            filename = here.joinpath('README.md')
        with open(filename, 'r', encoding='UTF8') as README:
            def complete_link(match):
                link: str = match[1]
                if any(link.lower().endswith(xt) for xt in ('jpg', 'gif', 'png', 'svg')):
                    return F'({__gitraw__}master/{link})'
                else:
                    return F'({__github__}blob/master/{link})'
            readme = README.read()
            return re.sub(R'(?<=\])\((?!\w+://)(.*?)\)', complete_link, readme)

    ppcfg: dict[str, dict] = toml.load(here.joinpath('pyproject.toml'))
    options: dict[str, list[str]] = ppcfg.get('tool', {}).get('il2cppmeta', {})
    requirements = list(options.get('requires', []))
    extras = {k: list(v) for k, v in options.get('extras', {}).items()}

    return dict(
        name=il2cppmeta.__distribution__,
        version=il2cppmeta.__version__,
        long_description=get_setup_readme(),
        author=__author__,
        description=__slogan__,
        long_description_content_type='text/markdown',
        url=__github__,
        python_requires=F'>={__minver__}',
        classifiers=__topics__,
        packages=setuptools.find_packages(include=('il2cppmeta*',)),
        install_requires=requirements,
        extras_require=extras,
        cmdclass={'deploy': DeployCommand},
    )


if __name__ == '__main__':
    setuptools.setup(**get_config())
