from cecvm import CVMConfiguration, CVMModel

# Models are expensive to identify, so they are shared between tests
_models = {}


def get_a2_config(num_components=2):
    """BCC tetrahedron approximation of the disordered A2 phase."""
    return CVMConfiguration(reference_clusters="A2-T",
                            reference_symmetry="A2-SG",
                            num_components=num_components)


def get_b2_config(num_components=2):
    """BCC tetrahedron approximation of the B2 ordered phase."""
    return CVMConfiguration(reference_clusters="A2-T",
                            reference_symmetry="A2-SG",
                            ordered_clusters="B2-T",
                            ordered_symmetry="B2-SG",
                            num_components=num_components)


def get_a1_config(num_components=2):
    """FCC tetrahedron approximation of the disordered A1 phase."""
    return CVMConfiguration(reference_clusters="A1-T",
                            reference_symmetry="A1-SG",
                            num_components=num_components)


def get_model(phase="A2", num_components=2):
    key = (phase, num_components)
    if key not in _models:
        if phase == "A2":
            config = get_a2_config(num_components)
        elif phase == "B2":
            config = get_b2_config(num_components)
        elif phase == "A1":
            config = get_a1_config(num_components)
        else:
            raise ValueError("Unknown phase {}".format(phase))
        _models[key] = CVMModel(config)
    return _models[key]


def nn_pair_eci(model, value=-1.0):
    """ECIs that are zero except for the nearest neighbour pair."""
    eci = [0.0] * model.num_eci
    for col in range(model.num_eci):
        if model.cmatrix.cf_types[col] == 2:
            eci[col] = value
    return eci
