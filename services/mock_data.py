"""Sample data served when GraphDB is unavailable.

Shapes match the ``to_dict()`` output of the corresponding service dataclasses
so the web layer can return either interchangeably.
"""

MOCK_STATS = {
    "total_reactions": 18118,
    "total_compounds": 26266,
    "patents_covered": 1976,
}

MOCK_REACTIONS = [
    {"id": "RXN-0001", "patent_id": "US03930836", "year": 1976,
     "reactants": ["BrCCO", "CC(C)=O"], "products": ["CC(C)OCCO"],
     "agents": ["NaOH"], "catalysts": [], "solvents": ["CCO"], "yield": 85},
    {"id": "RXN-0002", "patent_id": "US03930836", "year": 1976,
     "reactants": ["CC(C)OCCO", "ClS(=O)(=O)CCl"], "products": ["C(C)S(=O)(=O)OCCBr"],
     "agents": ["Et3N"], "catalysts": ["DMAP"], "solvents": ["CH2Cl2"], "yield": 72},
    {"id": "RXN-0003", "patent_id": "US03941123", "year": 1976,
     "reactants": ["c1ccccc1Br", "CC(=O)O"], "products": ["c1ccccc1OC(=O)C"],
     "agents": ["K2CO3"], "catalysts": ["Pd(OAc)2"], "solvents": ["DMF"], "yield": 91},
    {"id": "RXN-0004", "patent_id": "US03941123", "year": 1976,
     "reactants": ["CCO", "CC(=O)Cl"], "products": ["CCOC(=O)C"],
     "agents": ["Pyridine"], "catalysts": [], "solvents": ["THF"], "yield": 88},
    {"id": "RXN-0005", "patent_id": "US03952789", "year": 1976,
     "reactants": ["c1ccccc1", "HNO3"], "products": ["c1ccc(cc1)[N+](=O)[O-]"],
     "agents": ["H2SO4"], "catalysts": [], "solvents": [], "yield": 76},
    {"id": "RXN-0006", "patent_id": "US03952789", "year": 1976,
     "reactants": ["CCCCO", "PBr3"], "products": ["CCCCBr"],
     "agents": [], "catalysts": [], "solvents": ["Et2O"], "yield": 82},
    {"id": "RXN-0007", "patent_id": "US03963145", "year": 1976,
     "reactants": ["c1ccccc1CHO", "CH3MgBr"], "products": ["c1ccccc1C(C)O"],
     "agents": [], "catalysts": [], "solvents": ["THF"], "yield": 94},
    {"id": "RXN-0008", "patent_id": "US03963145", "year": 1976,
     "reactants": ["CC(=O)CC(=O)C", "NH2OH"], "products": ["CC(=NOH)CC(=O)C"],
     "agents": ["NaOAc"], "catalysts": [], "solvents": ["EtOH", "H2O"], "yield": 67},
    {"id": "RXN-0009", "patent_id": "US03975234", "year": 1976,
     "reactants": ["c1ccc2c(c1)cccc2", "Br2"], "products": ["c1ccc2c(c1)c(Br)ccc2"],
     "agents": ["FeBr3"], "catalysts": [], "solvents": ["CCl4"], "yield": 79},
    {"id": "RXN-0010", "patent_id": "US03975234", "year": 1976,
     "reactants": ["CCCC=O", "NaBH4"], "products": ["CCCCO"],
     "agents": [], "catalysts": [], "solvents": ["MeOH"], "yield": 96},
    {"id": "RXN-0011", "patent_id": "US03987456", "year": 1976,
     "reactants": ["c1ccccc1NH2", "CH3COCl"], "products": ["c1ccccc1NC(=O)C"],
     "agents": ["Et3N"], "catalysts": [], "solvents": ["CH2Cl2"], "yield": 89},
    {"id": "RXN-0012", "patent_id": "US03987456", "year": 1976,
     "reactants": ["CC(C)(C)OH", "SOCl2"], "products": ["CC(C)(C)Cl"],
     "agents": [], "catalysts": [], "solvents": [], "yield": 71},
]

MOCK_COMPOUNDS = [
    {"smiles": "BrCCO", "label": "2-Bromoethanol", "role_count": 15},
    {"smiles": "CCO", "label": "Ethanol", "role_count": 142},
    {"smiles": "CH2Cl2", "label": "Dichloromethane", "role_count": 234},
    {"smiles": "THF", "label": "Tetrahydrofuran", "role_count": 189},
    {"smiles": "Pd(OAc)2", "label": "Palladium acetate", "role_count": 56},
    {"smiles": "DMAP", "label": "4-Dimethylaminopyridine", "role_count": 78},
    {"smiles": "c1ccccc1", "label": "Benzene", "role_count": 312},
    {"smiles": "DMF", "label": "N,N-Dimethylformamide", "role_count": 198},
]

MOCK_SOLVENT_USAGE = [
    {"name": "DCM", "count": 2340, "percentage": 45},
    {"name": "THF", "count": 1890, "percentage": 36},
    {"name": "DMF", "count": 1560, "percentage": 30},
    {"name": "EtOH", "count": 1420, "percentage": 27},
    {"name": "MeOH", "count": 1180, "percentage": 22},
    {"name": "Toluene", "count": 980, "percentage": 19},
    {"name": "Et2O", "count": 760, "percentage": 14},
    {"name": "DMSO", "count": 620, "percentage": 12},
]

MOCK_CATALYST_USAGE = [
    {"name": "Pd(OAc)2", "count": 560, "percentage": 38},
    {"name": "Pd/C", "count": 480, "percentage": 32},
    {"name": "DMAP", "count": 380, "percentage": 25},
    {"name": "Pt/Al2O3", "count": 290, "percentage": 19},
    {"name": "Rh(PPh3)3Cl", "count": 210, "percentage": 14},
    {"name": "NiCl2", "count": 180, "percentage": 12},
]

MOCK_YIELD_DISTRIBUTION = [
    {"range": "0-30%", "count": 1820, "percentage": 10},
    {"range": "31-50%", "count": 3274, "percentage": 18},
    {"range": "51-70%", "count": 5435, "percentage": 30},
    {"range": "71-90%", "count": 5977, "percentage": 33},
    {"range": "91-100%", "count": 1612, "percentage": 9},
]

MOCK_INTERMEDIATES = [
    {"smiles": "CC(C)OCCO", "label": "Isopropyl glycol ether", "reaction_count": 142},
    {"smiles": "c1ccc(cc1)O", "label": "Phenol", "reaction_count": 128},
    {"smiles": "CC(=O)O", "label": "Acetic acid", "reaction_count": 115},
    {"smiles": "CCCC=O", "label": "Butyraldehyde", "reaction_count": 98},
    {"smiles": "c1ccccc1Br", "label": "Bromobenzene", "reaction_count": 87},
]


def mock_top_solvents():
    """Solvent usage shaped like TopSolvent.to_dict()."""
    return [
        {"solvent": "", "smiles": s["name"], "label": s["name"], "times_used": s["count"]}
        for s in MOCK_SOLVENT_USAGE
    ]


def mock_recent_reactions():
    """Sample reactions shaped like RecentReaction.to_dict()."""
    return [
        {
            "reaction": "",
            "reaction_id": r["id"],
            "year": r["year"],
            "reaction_smiles": f"{'.'.join(r['reactants'])}>>{'.'.join(r['products'])}",
        }
        for r in MOCK_REACTIONS
    ]


def mock_popular_compounds():
    """Sample compounds shaped like PopularCompound.to_dict(), most used first."""
    ranked = sorted(MOCK_COMPOUNDS, key=lambda c: c["role_count"], reverse=True)
    return [
        {"compound": "", "smiles": c["smiles"], "label": c["label"], "reactions_involved": c["role_count"]}
        for c in ranked
    ]
