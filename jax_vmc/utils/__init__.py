from . summary    import summary, write_metrics, latest_metrics, format_metrics
from . summary    import Log, SummaryLog
from . tensor_ops import unflatten_tensor_like_example, flatten_tree_into_tensor
from . startup    import set_compute_parameters, configure_logger
