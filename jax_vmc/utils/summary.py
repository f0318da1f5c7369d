import math
from abc import ABC, abstractmethod


def summary(writer, metrics, step):
    for key in metrics:
        writer.add_scalar(key, metrics[key], global_step=step)


def write_metrics(metric_file, metrics, step, header=None):
    '''
    Write the metrics into a csv file.

    The header goes in on the first step, or whenever `header` is True.
    '''
    if header is None:
        header = step == 0
    if header:
        metric_file.write("step,"+",".join(metrics.keys())+"\n")

    # Write the metrics in:
    values = [ f"{v:.5f}" for v in metrics.values()]
    metric_file.write(f"{step}," + ",".join(values)+"\n")
    metric_file.flush()


def latest_metrics(history):
    """
    Pull the most recent scalar of every stream out of a history map
    (name -> list of OperatorValue), skipping empty or non-scalar streams.
    """
    metrics = {}
    for name, values in history.items():
        if len(values) == 0 or not values[-1].is_scalar:
            continue
        metrics[name] = float(values[-1].get_scalar())
    return metrics


def format_metrics(metrics, step=None):
    parts = []
    for name, value in metrics.items():
        if math.isfinite(value):
            parts.append(f"{name} = {value:.6f}")
        else:
            parts.append(f"{name} = {value}")
    line = ", ".join(parts)
    if step is not None:
        line = f"step  = {step}, " + line
    return line


class Log(ABC):
    """
    Reporting callback for the Monte Carlo and VMC runners.  `log` gets the
    accumulated observable map (name -> list of OperatorValue) and returns
    a line to log at INFO, or None.
    """

    @abstractmethod
    def log(self, data):
        pass


class SummaryLog(Log):
    """
    Report the latest scalar of every stream: to a tensorboardX writer and a
    csv file when given, and as a log line every `every` calls.
    """

    def __init__(self, writer=None, metric_file=None, every=1):
        self.writer      = writer
        self.metric_file = metric_file
        self.every       = every
        self.step        = 0

    def log(self, data):
        metrics = latest_metrics(data)
        if self.writer is not None:
            summary(self.writer, metrics, self.step)
        if self.metric_file is not None:
            write_metrics(self.metric_file, metrics, self.step)

        step = self.step
        self.step += 1
        if self.every is None or step % self.every != 0:
            return None
        return format_metrics(metrics, step)
