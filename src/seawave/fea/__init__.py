"""
FEM Engine
==========
The finite element implementation of the wave field computation.

Layout:
    pre       mesh loading and source terms
    analysis  elements, DOF maps, periodic resolution and the model
    solvers   global assembly and the linear solve
    post      field reconstruction and plotting
"""
