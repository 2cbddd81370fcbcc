"""
# Model Interface and Stock Synthesis Implementation

This module provides an abstract base class for running assessment models on
prepared folders, and a concrete implementation that launches the Stock
Synthesis (SS3) executable.

## Classes

- `Model`: Abstract base class defining the interface for all models
- `SS3Model`: Runs the SS3 executable in a folder holding its input files

## Key Features

- **Parallel Execution**: Support for running multiple model folders concurrently
- **Flexible Configuration**: Customizable executable, arguments and file names
- **Failure Handling**: Failed runs either raise or return None

## Example Usage

```python
from ss3sim_tools import SS3Model

model = SS3Model(run_kwargs={'exe': '/opt/ss3/ss3', 'exe_args': ['-nohess']})

# Run a single iteration folder
report = model.run("sims/base/1", **model.run_kwargs)

# Run many folders
reports = model.run_parallel(["sims/base/1", "sims/base/2"], workers=4, **model.run_kwargs)
```
"""

# Basic data utils
from typing import Callable, Any, Sequence
from abc import abstractmethod, ABC

# For model execution
import os
import logging
import subprocess
from functools import partial

from ss3sim_tools.utils.datfile import DatList, write_dat

# Parallel runs
from tqdm import tqdm
from concurrent.futures import ThreadPoolExecutor, as_completed


class Model(ABC):
    """
    Abstract base class for assessment models.

    This class defines the interface every model wrapper implements so the
    simulation driver can launch runs without knowing the executable.

    Attributes:
        run_kwargs (dict): Keyword arguments passed to model execution methods.

    Example:
        ```python
        class MyModel(Model):
            @staticmethod
            def run(folder, *args, **kwargs):
                ...

            # Implement other abstract methods...
        ```
    """
    def __init__(self, run_kwargs: dict = None):
        """
        Initialize the Model instance.

        Args:
            run_kwargs (dict, optional): Keyword arguments for model execution.
                Defaults to an empty dict.
        """
        self.run_kwargs = run_kwargs if run_kwargs is not None else {}

    @staticmethod
    @abstractmethod
    def run_parallel(folders: Sequence[str], *args, **kwargs) -> list[Any | None]:
        """
        Execute the model in several folders in parallel.

        Returns:
            list[Any | None]: One output per folder, in input order. None marks
                a failed run.
        """
        pass

    @staticmethod
    @abstractmethod
    def run(folder: str, *args, **kwargs) -> Any | None:
        """
        Execute the model in a single folder.

        Returns:
            Any | None: Model output, or None if the run failed.
        """
        pass

    @staticmethod
    @abstractmethod
    def launch_model(*args, **kwargs) -> Any | None:
        """
        Low-level model execution, called by `run`.

        This method handles the actual subprocess execution and checks that
        the expected output exists.
        """
        pass

    def get_objective(self) -> Callable:
        """
        Create a partial function for model execution with predefined kwargs.

        Returns:
            Callable: `run` with `run_kwargs` already bound.

        Example:
            ```python
            model = SS3Model(run_kwargs={'exe': 'ss3'})
            run = model.get_objective()
            report = run(folder="sims/base/1")
            ```
        """
        return partial(
            self.run,
            **self.run_kwargs
        )


class SS3Model(Model):
    """
    Concrete implementation of the Model interface for Stock Synthesis.

    Each run happens in its own folder, which must already hold the starter,
    control and forecast files. The data file can be written by `run` before
    the executable is launched.

    Attributes:
    - run_kwargs (dict): Arguments for model execution

    Example:
        ```python
        model = SS3Model(run_kwargs={'exe': 'ss3', 'exe_args': ['-nohess']})
        report = model.run('sims/base/1', dat=sampled_dat, **model.run_kwargs)
        ```
    """
    def __init__(self, run_kwargs: dict = None):
        """
        Initialize the SS3Model instance.

        Args:
            run_kwargs (dict, optional): Keyword arguments for model execution.
                Expected keys include:
                - 'exe': str path or name of the SS3 executable
                - 'exe_args': list[str] command line arguments
                - 'dat_name': str data file name the starter file points to
                - 'report_name': str output file whose presence marks success
                - 'return_on_fail': bool whether to return None on model failure
        """
        super().__init__(run_kwargs=run_kwargs)

    @staticmethod
    def run_parallel(
        folders: Sequence[str],
        workers: int = 4,
        dats: Sequence[DatList | None] = None,
        **kwargs
    ) -> list[str | None]:
        """
        Execute SS3 in several folders concurrently.

        Args:
            folders (Sequence[str]): Folders to run in.
            workers (int, optional): Number of concurrent worker threads.
                Defaults to 4.
            dats (Sequence[DatList | None], optional): Data file to write into
                each folder before running, aligned with `folders`.
            **kwargs: Additional keyword arguments passed to individual run() calls.

        Returns:
            list[str | None]: Report file path per folder, in input order.
                Failed runs return None in the corresponding position.

        Note:
            - Failed runs are logged with their folder and error message
            - Progress is displayed using tqdm progress bar
        """

        N = len(folders)
        res = [None for _ in range(N)]  # Ensure that we have an accessible index

        pbar = tqdm(total=N)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(
                    SS3Model.run,
                    folders[i],
                    dat=dats[i] if dats is not None else None,
                    **kwargs
                ):
                i for i in range(N)  # Store corresponding folder number
            }

            for future in as_completed(futures):
                pbar.update(1)
                idx = futures[future]
                try:
                    res[idx] = future.result()
                except Exception as e:
                    logging.error(f"Model run in {folders[idx]} failed: {e}")

        pbar.close()

        return res

    @staticmethod
    def run(
        folder: str,
        dat: DatList = None,
        dat_name: str = "ss3.dat",
        **kwargs
    ) -> str | None:
        """
        Execute a single SS3 run in a folder.

        Args:
            folder (str): Folder holding the model input files.
            dat (DatList, optional): Data file to write as `dat_name` before
                running. If None, the existing data file is used.
            dat_name (str, optional): Data file name. Defaults to "ss3.dat".
            **kwargs: Additional keyword arguments passed to launch_model().

        Returns:
            str | None: Path to the report file, or None if the run failed
                and `return_on_fail` is True.
        """
        if dat is not None:
            write_dat(dat, os.path.join(folder, dat_name), overwrite=True)

        return SS3Model.launch_model(folder=folder, **kwargs)

    @staticmethod
    def launch_model(
        folder: str,
        exe: str = "ss3",
        exe_args: Sequence[str] = ("-nohess",),
        report_name: str = "Report.sso",
        out: int = subprocess.DEVNULL,
        err: int = subprocess.DEVNULL,
        return_on_fail: bool = False,
        verbose: bool = False
    ) -> str | None:
        """
        Launch the SS3 executable and check for its report file.

        Args:
            folder (str): Working directory for the executable.
            exe (str, optional): Executable path or name. Relative paths are
                resolved against the current directory. Defaults to "ss3".
            exe_args (Sequence[str], optional): Command line arguments.
                Defaults to ("-nohess",).
            report_name (str, optional): Output file expected after a
                successful run. Defaults to "Report.sso".
            out (int, optional): File descriptor for stdout redirection.
                Defaults to subprocess.DEVNULL to suppress output.
            err (int, optional): File descriptor for stderr redirection.
                Defaults to subprocess.DEVNULL to suppress errors.
            return_on_fail (bool, optional): If True, return None on a
                non-zero exit code instead of raising. Defaults to False.
            verbose (bool, optional): If True, log the command being run.

        Returns:
            str | None: Path to the report file, or None on failure when
                `return_on_fail` is True.

        Raises:
            subprocess.CalledProcessError: If the executable exits non-zero
                and return_on_fail is False.
            FileNotFoundError: If the report file was not created.
        """
        if os.path.sep in exe:
            exe = os.path.abspath(exe)
        cmd = [exe, *exe_args]

        if verbose:
            logging.info(f"Running {' '.join(cmd)} in {folder}")

        p = subprocess.run(
            cmd,
            cwd=folder,
            stdout=out,
            stderr=err
        )

        if p.returncode != 0:
            logging.warning(f"Model in {folder} failed with returncode: {p.returncode}")
            if return_on_fail:
                return None
            raise subprocess.CalledProcessError(p.returncode, cmd)

        report = os.path.join(folder, report_name)
        if not os.path.exists(report):
            raise FileNotFoundError(
                f"Expected output file not found: {report}"
            )

        return report
