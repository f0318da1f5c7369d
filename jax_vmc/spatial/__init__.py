from . spatial_init         import initialize_configuration
from . spatial_manipulation import generate_pairs, pair_distances, point_distances
from . walk import Metropolis, MetropolisBox, MetropolisDiffuse
from . walk import seed_to_key, init_metropolis
