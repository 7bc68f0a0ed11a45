# Empty file
from cecvm.identification.geometry import Vector3D, Site, Sublattice, Cluster
from cecvm.identification.symmetry import SymmetryOperation, Orbit
from cecvm.identification.symmetry import generate_orbit, is_translated
from cecvm.identification.symmetry import transform_to_reference
from cecvm.identification.cluster_enumeration import enumerate_cluster_types
from cecvm.identification.cluster_enumeration import ClusterTypeList
from cecvm.identification.cluster_enumeration import classify_ordered_clusters
from cecvm.identification.kikuchi_baker import nij_table
from cecvm.identification.kikuchi_baker import kikuchi_baker_coefficients
from cecvm.identification.cluster_identifier import identify_clusters
from cecvm.identification.cluster_identifier import ClusterIdentification
from cecvm.identification.cf_identifier import identify_cfs, CFIdentification
from cecvm.identification.cf_identifier import CFIndex, GroupedCFs
