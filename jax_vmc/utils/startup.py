import jax
import logging
from logging import handlers
import pathlib


def set_compute_parameters():
    """
    Pick the device the run lives on and switch on double precision.
    The Monte Carlo loop is single-chain, so one device is all we use.
    """
    try:
        devices = jax.local_devices()
    except RuntimeError:
        devices = []
    if len(devices) > 0:
        target_device = devices[0]
    else:
        target_device = jax.devices("cpu")[0]
    # Not a pure function by any means ...
    jax.config.update("jax_enable_x64", True)

    return target_device


def configure_logger(save_path, level=logging.INFO):

    logger = logging.getLogger()

    # Create a handler for STDOUT:
    stream_handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    stream_handler.setFormatter(formatter)
    handler = handlers.MemoryHandler(capacity = 1, target=stream_handler)
    logger.addHandler(handler)

    # Add a file handler too:
    log_file = pathlib.Path(save_path) / pathlib.Path("process.log")
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)
    file_handler = handlers.MemoryHandler(capacity=1, target=file_handler)
    logger.addHandler(file_handler)

    logger.setLevel(level)

    return logger
